"""
XML part builders for the PPTX package.

Every function here is pure: it takes plain values and returns the text of
one archive part.  Identifier schemes (relationship ids, slide ids, shape
ids) are functions of list positions so two builds of the same input agree
on every byte apart from the core-property timestamps.
"""
import re
from typing import Iterable, List, Sequence
from xml.sax.saxutils import escape

from pptx.opc.constants import CONTENT_TYPE as CT
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml.ns import nsdecls

from .templates import SlideTemplate

XML_HEADER = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

CONTENT_TYPES_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
PACKAGE_RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
EXTENDED_PROPS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"
DOC_PROPS_VTYPES_NS = "http://schemas.openxmlformats.org/officeDocument/2006/docPropsVTypes"

PML_NAMESPACES = nsdecls("a", "r", "p")

# Part names inside the archive.
CONTENT_TYPES_PART = "[Content_Types].xml"
ROOT_RELS_PART = "_rels/.rels"
APP_PROPS_PART = "docProps/app.xml"
CORE_PROPS_PART = "docProps/core.xml"
PRESENTATION_PART = "ppt/presentation.xml"
PRESENTATION_RELS_PART = "ppt/_rels/presentation.xml.rels"
SLIDE_MASTER_PART = "ppt/slideMasters/slideMaster1.xml"
SLIDE_MASTER_RELS_PART = "ppt/slideMasters/_rels/slideMaster1.xml.rels"
SLIDE_LAYOUT_PART = "ppt/slideLayouts/slideLayout1.xml"
THEME_PART = "ppt/theme/theme1.xml"

APPLICATION_NAME = "md2pptx"
APP_VERSION = "16.0000"

# presentation.xml reserves rId1 for the master, so slide i (0-based) is
# rId{i + SLIDE_RID_OFFSET} and the theme follows the last slide.
SLIDE_RID_OFFSET = 2
FIRST_SLIDE_ID = 256
SLIDE_MASTER_ID = 2147483648
SLIDE_LAYOUT_ID = 2147483649


def escape_xml(text: str) -> str:
    """Escape the five XML reserved characters, each exactly once."""
    return escape(text, {'"': "&quot;", "'": "&apos;"})


# C0 controls other than tab, newline and carriage return are not legal XML 1.0.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def text_xml(text: str) -> str:
    """
    Escape *text* for an element body.  Illegal control characters are
    written in the OOXML ``_xHHHH_`` form.
    """
    return escape_xml(_CONTROL_CHARS.sub(lambda m: f"_x{ord(m.group()):04X}_", text))


def slide_part_name(slide_number: int) -> str:
    return f"ppt/slides/slide{slide_number}.xml"


def slide_rels_part_name(slide_number: int) -> str:
    return f"ppt/slides/_rels/slide{slide_number}.xml.rels"


def slide_rid(index: int) -> str:
    """Relationship id of the 0-based *index*-th slide in presentation.xml.rels."""
    return f"rId{index + SLIDE_RID_OFFSET}"


def theme_rid(slide_count: int) -> str:
    return f"rId{slide_count + SLIDE_RID_OFFSET}"


def _relationships(entries: Iterable[tuple]) -> str:
    body = "".join(
        f'\n    <Relationship Id="{rid}" Type="{rel_type}" Target="{target}"/>'
        for rid, rel_type, target in entries
    )
    return f'{XML_HEADER}<Relationships xmlns="{PACKAGE_RELS_NS}">{body}\n</Relationships>'


# ----------------------------------------------------------------------
# Package-level parts
# ----------------------------------------------------------------------

def content_types_xml(slide_count: int) -> str:
    overrides = [
        (f"/{PRESENTATION_PART}", CT.PML_PRESENTATION_MAIN),
        (f"/{SLIDE_MASTER_PART}", CT.PML_SLIDE_MASTER),
        (f"/{SLIDE_LAYOUT_PART}", CT.PML_SLIDE_LAYOUT),
        (f"/{THEME_PART}", CT.OFC_THEME),
        (f"/{CORE_PROPS_PART}", CT.OPC_CORE_PROPERTIES),
        (f"/{APP_PROPS_PART}", CT.OFC_EXTENDED_PROPERTIES),
    ]
    overrides.extend(
        (f"/{slide_part_name(n)}", CT.PML_SLIDE) for n in range(1, slide_count + 1)
    )
    body = "".join(
        f'\n    <Override PartName="{name}" ContentType="{ctype}"/>'
        for name, ctype in overrides
    )
    return (
        f'{XML_HEADER}<Types xmlns="{CONTENT_TYPES_NS}">'
        f'\n    <Default Extension="rels" ContentType="{CT.OPC_RELATIONSHIPS}"/>'
        f'\n    <Default Extension="xml" ContentType="{CT.XML}"/>'
        f"{body}\n</Types>"
    )


def root_relationships_xml() -> str:
    return _relationships([
        ("rId1", RT.OFFICE_DOCUMENT, PRESENTATION_PART),
        ("rId2", RT.CORE_PROPERTIES, CORE_PROPS_PART),
        ("rId3", RT.EXTENDED_PROPERTIES, APP_PROPS_PART),
    ])


def app_properties_xml(slide_count: int) -> str:
    return f"""{XML_HEADER}<Properties xmlns="{EXTENDED_PROPS_NS}" xmlns:vt="{DOC_PROPS_VTYPES_NS}">
    <Application>{APPLICATION_NAME}</Application>
    <PresentationFormat>On-screen Show (4:3)</PresentationFormat>
    <Slides>{slide_count}</Slides>
    <Notes>0</Notes>
    <HiddenSlides>0</HiddenSlides>
    <MMClips>0</MMClips>
    <ScaleCrop>false</ScaleCrop>
    <Company>{APPLICATION_NAME}</Company>
    <AppVersion>{APP_VERSION}</AppVersion>
</Properties>"""


def core_properties_xml(title: str, author: str, created: str, modified: str,
                        description: str = None) -> str:
    """
    Dublin Core properties.  *created* and *modified* are W3CDTF strings.
    """
    description_xml = ""
    if description:
        description_xml = f"\n    <dc:description>{text_xml(description)}</dc:description>"
    return f"""{XML_HEADER}<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:dcterms="http://purl.org/dc/terms/" xmlns:dcmitype="http://purl.org/dc/dcmitype/" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
    <dc:title>{text_xml(title)}</dc:title>
    <dc:creator>{text_xml(author)}</dc:creator>{description_xml}
    <dcterms:created xsi:type="dcterms:W3CDTF">{created}</dcterms:created>
    <dcterms:modified xsi:type="dcterms:W3CDTF">{modified}</dcterms:modified>
</cp:coreProperties>"""


# ----------------------------------------------------------------------
# Presentation part and its relationships
# ----------------------------------------------------------------------

def presentation_xml(slide_count: int, template: SlideTemplate) -> str:
    layout = template.layout
    slide_ids = "".join(
        f'\n        <p:sldId id="{FIRST_SLIDE_ID + i}" r:id="{slide_rid(i)}"/>'
        for i in range(slide_count)
    )
    return f"""{XML_HEADER}<p:presentation {PML_NAMESPACES}>
    <p:sldMasterIdLst>
        <p:sldMasterId id="{SLIDE_MASTER_ID}" r:id="rId1"/>
    </p:sldMasterIdLst>
    <p:sldIdLst>{slide_ids}
    </p:sldIdLst>
    <p:sldSz cx="{layout.slide_width}" cy="{layout.slide_height}"/>
    <p:notesSz cx="{layout.slide_height}" cy="{layout.slide_width}"/>
    <p:defaultTextStyle>
        <a:defPPr>
            <a:defRPr lang="en-US"/>
        </a:defPPr>
    </p:defaultTextStyle>
</p:presentation>"""


def presentation_relationships_xml(slide_count: int) -> str:
    entries = [("rId1", RT.SLIDE_MASTER, "slideMasters/slideMaster1.xml")]
    entries.extend(
        (slide_rid(i), RT.SLIDE, f"slides/slide{i + 1}.xml") for i in range(slide_count)
    )
    entries.append((theme_rid(slide_count), RT.THEME, "theme/theme1.xml"))
    return _relationships(entries)


# ----------------------------------------------------------------------
# Master, layout and theme
# ----------------------------------------------------------------------

_EMPTY_GROUP = """<p:nvGrpSpPr>
                <p:cNvPr id="1" name=""/>
                <p:cNvGrpSpPr/>
                <p:nvPr/>
            </p:nvGrpSpPr>
            <p:grpSpPr>
                <a:xfrm>
                    <a:off x="0" y="0"/>
                    <a:ext cx="0" cy="0"/>
                    <a:chOff x="0" y="0"/>
                    <a:chExt cx="0" cy="0"/>
                </a:xfrm>
            </p:grpSpPr>"""


def _text_style(tag: str, color: str, font: str, size: str = "") -> str:
    size_attr = f' sz="{size}"' if size else ""
    return f"""<p:{tag}>
            <a:lvl1pPr>
                <a:defRPr{size_attr}>
                    <a:solidFill>
                        <a:srgbClr val="{color}"/>
                    </a:solidFill>
                    <a:latin typeface="{escape_xml(font)}"/>
                </a:defRPr>
            </a:lvl1pPr>
        </p:{tag}>"""


def slide_master_xml(template: SlideTemplate) -> str:
    colors = template.colors
    fonts = template.fonts
    return f"""{XML_HEADER}<p:sldMaster {PML_NAMESPACES}>
    <p:cSld>
        <p:bg>
            <p:bgPr>
                <a:solidFill>
                    <a:srgbClr val="{colors.background}"/>
                </a:solidFill>
                <a:effectLst/>
            </p:bgPr>
        </p:bg>
        <p:spTree>
            {_EMPTY_GROUP}
        </p:spTree>
    </p:cSld>
    <p:clrMap bg1="lt1" tx1="dk1" bg2="lt2" tx2="dk2" accent1="accent1" accent2="accent2" accent3="accent3" accent4="accent4" accent5="accent5" accent6="accent6" hlink="hlink" folHlink="folHlink"/>
    <p:sldLayoutIdLst>
        <p:sldLayoutId id="{SLIDE_LAYOUT_ID}" r:id="rId1"/>
    </p:sldLayoutIdLst>
    <p:txStyles>
        {_text_style("titleStyle", colors.text_primary, fonts.title_font, "4400")}
        {_text_style("bodyStyle", colors.text_primary, fonts.body_font, "2800")}
        {_text_style("otherStyle", colors.text_secondary, fonts.body_font)}
    </p:txStyles>
</p:sldMaster>"""


def slide_master_relationships_xml() -> str:
    return _relationships([
        ("rId1", RT.SLIDE_LAYOUT, "../slideLayouts/slideLayout1.xml"),
        ("rId2", RT.THEME, "../theme/theme1.xml"),
    ])


def _layout_placeholder(shape_id: int, name: str, ph: str, prompt: str) -> str:
    return f"""<p:sp>
                <p:nvSpPr>
                    <p:cNvPr id="{shape_id}" name="{name}"/>
                    <p:cNvSpPr>
                        <a:spLocks noGrp="1"/>
                    </p:cNvSpPr>
                    <p:nvPr>
                        <p:ph {ph}/>
                    </p:nvPr>
                </p:nvSpPr>
                <p:spPr/>
                <p:txBody>
                    <a:bodyPr/>
                    <a:lstStyle/>
                    <a:p>
                        <a:r>
                            <a:rPr lang="en-US"/>
                            <a:t>{prompt}</a:t>
                        </a:r>
                        <a:endParaRPr lang="en-US"/>
                    </a:p>
                </p:txBody>
            </p:sp>"""


def slide_layout_xml() -> str:
    title = _layout_placeholder(2, "Title 1", 'type="ctrTitle"', "Click to edit Master title style")
    subtitle = _layout_placeholder(3, "Subtitle 2", 'type="subTitle" idx="1"', "Click to edit Master subtitle style")
    return f"""{XML_HEADER}<p:sldLayout {PML_NAMESPACES} type="title" preserve="1">
    <p:cSld name="Title Slide">
        <p:spTree>
            {_EMPTY_GROUP}
            {title}
            {subtitle}
        </p:spTree>
    </p:cSld>
    <p:clrMapOvr>
        <a:masterClrMapping/>
    </p:clrMapOvr>
</p:sldLayout>"""


def _scheme_color(tag: str, value: str) -> str:
    return f"""
            <a:{tag}>
                <a:srgbClr val="{value}"/>
            </a:{tag}>"""


def _font(tag: str, typeface: str) -> str:
    return f"""
            <a:{tag}>
                <a:latin typeface="{escape_xml(typeface)}"/>
                <a:ea typeface=""/>
                <a:cs typeface=""/>
            </a:{tag}>"""


def _shaded_gradient(stops: Sequence[tuple], scaled: str = None, path: str = None) -> str:
    gs = "".join(
        f'<a:gs pos="{pos}"><a:schemeClr val="phClr">{mods}</a:schemeClr></a:gs>'
        for pos, mods in stops
    )
    if scaled is not None:
        shade = f'<a:lin ang="16200000" scaled="{scaled}"/>'
    else:
        shade = f'<a:path path="circle"><a:fillToRect {path}/></a:path>'
    return f'<a:gradFill rotWithShape="1"><a:gsLst>{gs}</a:gsLst>{shade}</a:gradFill>'


def _outer_shadow(dist: str, alpha: str) -> str:
    return (
        f'<a:effectStyle><a:effectLst><a:outerShdw blurRad="40000" dist="{dist}" '
        f'dir="5400000" rotWithShape="0"><a:srgbClr val="000000"><a:alpha val="{alpha}"/>'
        f"</a:srgbClr></a:outerShdw></a:effectLst></a:effectStyle>"
    )


def _line(width: str, mods: str = "") -> str:
    return (
        f'<a:ln w="{width}" cap="flat" cmpd="sng" algn="ctr"><a:solidFill>'
        f'<a:schemeClr val="phClr">{mods}</a:schemeClr></a:solidFill>'
        f'<a:prstDash val="solid"/></a:ln>'
    )


_SOLID_PH = '<a:solidFill><a:schemeClr val="phClr"/></a:solidFill>'

_FORMAT_SCHEME = (
    '<a:fmtScheme name="Office">'
    "<a:fillStyleLst>"
    + _SOLID_PH
    + _shaded_gradient([
        ("0", '<a:tint val="50000"/><a:satMod val="300000"/>'),
        ("35000", '<a:tint val="37000"/><a:satMod val="300000"/>'),
        ("100000", '<a:tint val="15000"/><a:satMod val="350000"/>'),
    ], scaled="1")
    + _shaded_gradient([
        ("0", '<a:shade val="51000"/><a:satMod val="130000"/>'),
        ("80000", '<a:shade val="93000"/><a:satMod val="130000"/>'),
        ("100000", '<a:shade val="94000"/><a:satMod val="135000"/>'),
    ], scaled="0")
    + "</a:fillStyleLst>"
    "<a:lnStyleLst>"
    + _line("9525", '<a:shade val="95000"/><a:satMod val="105000"/>')
    + _line("25400")
    + _line("38100")
    + "</a:lnStyleLst>"
    "<a:effectStyleLst>"
    + _outer_shadow("20000", "38000")
    + _outer_shadow("23000", "35000")
    + _outer_shadow("23000", "35000")
    + "</a:effectStyleLst>"
    "<a:bgFillStyleLst>"
    + _SOLID_PH
    + _shaded_gradient([
        ("0", '<a:tint val="40000"/><a:satMod val="350000"/>'),
        ("40000", '<a:tint val="45000"/><a:shade val="99000"/><a:satMod val="350000"/>'),
        ("100000", '<a:shade val="20000"/><a:satMod val="255000"/>'),
    ], path='l="50000" t="-80000" r="50000" b="180000"')
    + _shaded_gradient([
        ("0", '<a:tint val="80000"/><a:satMod val="300000"/>'),
        ("100000", '<a:shade val="30000"/><a:satMod val="200000"/>'),
    ], path='l="50000" t="50000" r="50000" b="50000"')
    + "</a:bgFillStyleLst>"
    "</a:fmtScheme>"
)


def theme_xml(template: SlideTemplate) -> str:
    colors = template.colors
    fonts = template.fonts
    scheme = "".join([
        _scheme_color("dk1", colors.text_primary),
        _scheme_color("lt1", colors.background),
        _scheme_color("dk2", colors.text_secondary),
        _scheme_color("lt2", "EEECE1"),
        _scheme_color("accent1", colors.accent_1),
        _scheme_color("accent2", colors.accent_2),
        _scheme_color("accent3", colors.accent_3),
        _scheme_color("accent4", "8064A2"),
        _scheme_color("accent5", "4BACC6"),
        _scheme_color("accent6", "F39646"),
        _scheme_color("hlink", "0000FF"),
        _scheme_color("folHlink", "800080"),
    ])
    return f"""{XML_HEADER}<a:theme {nsdecls("a")} name="{escape_xml(template.name)} Theme">
    <a:themeElements>
        <a:clrScheme name="{escape_xml(template.name)}">{scheme}
        </a:clrScheme>
        <a:fontScheme name="{escape_xml(template.name)}">{_font("majorFont", fonts.title_font)}{_font("minorFont", fonts.body_font)}
        </a:fontScheme>
        {_FORMAT_SCHEME}
    </a:themeElements>
    <a:objectDefaults/>
    <a:extraClrSchemeLst/>
</a:theme>"""


# ----------------------------------------------------------------------
# Slides
# ----------------------------------------------------------------------

def run_paragraph(text: str, font: str = None) -> str:
    """One ``<a:p>`` with a single escaped run."""
    if font:
        rpr = f'<a:rPr lang="en-US"><a:latin typeface="{escape_xml(font)}"/></a:rPr>'
    else:
        rpr = '<a:rPr lang="en-US"/>'
    return (
        f"\n                    <a:p>"
        f"<a:r>{rpr}<a:t>{text_xml(text)}</a:t></a:r>"
        f'<a:endParaRPr lang="en-US"/></a:p>'
    )


def list_paragraphs(items: Sequence[str], numbered: bool = False) -> str:
    if numbered:
        bullet = '<a:buFont typeface="+mj-lt"/><a:buAutoNum type="arabicPeriod"/>'
    else:
        bullet = '<a:buFont typeface="Arial"/><a:buChar char="&#8226;"/>'
    return "".join(
        f'\n                    <a:p><a:pPr marL="342900" lvl="0" indent="-342900">{bullet}</a:pPr>'
        f'<a:r><a:rPr lang="en-US"/><a:t>{text_xml(item)}</a:t></a:r>'
        f'<a:endParaRPr lang="en-US"/></a:p>'
        for item in items
    )


def shape_xml(shape_id: int, name: str, placeholder: str, x: int, y: int, cx: int, cy: int,
              paragraphs: str, fill: str = None) -> str:
    """A placeholder text shape at the given EMU geometry."""
    fill_xml = ""
    if fill:
        fill_xml = f'\n                    <a:solidFill><a:srgbClr val="{fill}"/></a:solidFill>'
    return f"""
            <p:sp>
                <p:nvSpPr>
                    <p:cNvPr id="{shape_id}" name="{escape_xml(name)}"/>
                    <p:cNvSpPr>
                        <a:spLocks noGrp="1"/>
                    </p:cNvSpPr>
                    <p:nvPr>
                        <p:ph {placeholder}/>
                    </p:nvPr>
                </p:nvSpPr>
                <p:spPr>
                    <a:xfrm>
                        <a:off x="{x}" y="{y}"/>
                        <a:ext cx="{cx}" cy="{cy}"/>
                    </a:xfrm>{fill_xml}
                </p:spPr>
                <p:txBody>
                    <a:bodyPr/>
                    <a:lstStyle/>{paragraphs}
                </p:txBody>
            </p:sp>"""


def slide_xml(shapes: List[str]) -> str:
    return f"""{XML_HEADER}<p:sld {PML_NAMESPACES}>
    <p:cSld>
        <p:spTree>
            {_EMPTY_GROUP}{"".join(shapes)}
        </p:spTree>
    </p:cSld>
    <p:clrMapOvr>
        <a:masterClrMapping/>
    </p:clrMapOvr>
</p:sld>"""


def slide_relationships_xml() -> str:
    return _relationships([
        ("rId1", RT.SLIDE_LAYOUT, "../slideLayouts/slideLayout1.xml"),
    ])
