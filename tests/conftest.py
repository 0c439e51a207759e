import pytest


SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE JMdict [
<!ELEMENT JMdict (entry*)>
<!-- the DTD's own expansions must not leak into the output: &n; "it's" -->
<!ENTITY n "noun (common) (futsuumeishi)">
<!ENTITY v5k "Godan verb with 'ku' ending">
<!ATTLIST gloss xml:lang CDATA "eng">
]>
<JMdict>
<!-- JMdict created: 2024-05-01 -->
<entry>
<ent_seq>1000000</ent_seq>
<k_ele><keb>猫</keb><ke_pri>ichi1</ke_pri></k_ele>
<r_ele><reb>ねこ</reb><re_pri>ichi1</re_pri></r_ele>
<sense>
<pos>&n;</pos>
<gloss>cat</gloss>
<gloss xml:lang="ger">Katze</gloss>
</sense>
</entry>
<entry>
<ent_seq>1000010</ent_seq>
<k_ele><keb>書く</keb></k_ele>
<r_ele><reb>かく</reb></r_ele>
<r_ele><reb>カク</reb><re_nokanji/><re_inf>&ok;</re_inf></r_ele>
<sense>
<stagk>書く</stagk>
<pos>&v5k;</pos>
<pos>&vt;</pos>
<xref>描く</xref>
<field>&comp;</field>
<misc>&col;</misc>
<s_inf>often written in kana</s_inf>
<lsource xml:lang="ger" ls_type="part" ls_wasei="y">Arbeit</lsource>
<dial>&ksb;</dial>
<gloss g_type="expl">to write</gloss>
</sense>
</entry>
<entry>
<ent_seq>1000020</ent_seq>
<r_ele><reb>あ</reb></r_ele>
<sense>
<pos>&int;</pos>
<misc>&chn;</misc>
<gloss>&quote;ah&quote;</gloss>
<gloss g_type="&quote;lit&quote;">R&amp;D &#12354;</gloss>
<gloss><![CDATA[a &bogus; b]]></gloss>
<example>
<ex_srce exsrc_type="tat">12345</ex_srce>
<ex_text>あ</ex_text>
<ex_sent xml:lang="jpn">あ、そうか。</ex_sent>
<ex_sent xml:lang="eng">Ah, I see.</ex_sent>
</example>
</sense>
</entry>
</JMdict>
"""


@pytest.fixture
def sample_xml() -> bytes:
    return SAMPLE_XML.encode("utf-8")


@pytest.fixture
def make_doc():
    """把若干 entry 片段包成一个最小 JMdict 文档。"""

    def _make(body: str) -> bytes:
        return ('<?xml version="1.0" encoding="UTF-8"?>\n<JMdict>\n' + body + "\n</JMdict>\n").encode("utf-8")

    return _make
