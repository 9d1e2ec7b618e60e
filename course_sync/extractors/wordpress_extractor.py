import re

from pydantic import ValidationError

from course_sync.models import ParsedExport, ParsedLesson, ParsedModule, RawExportItem
from course_sync.parsers.content_formatter import decode_entities, format_content
from course_sync.parsers.media_extractor import extract_media, pick_primary_video

# Tipos de post do LearnDash e a entidade correspondente no banco.
POST_TYPES = {
    'sfwd-courses': 'course',
    'sfwd-lessons': 'module',
    'sfwd-topic': 'lesson',
}

_ITEM = re.compile(r'<item>([\s\S]*?)</item>', re.IGNORECASE)
_TITLE = re.compile(r'<title>(?:<!\[CDATA\[([\s\S]*?)\]\]>|([^<]*))</title>')
_POST_TYPE = re.compile(r'<wp:post_type>(?:<!\[CDATA\[([\s\S]*?)\]\]>|([^<]*))</wp:post_type>')
_POST_ID = re.compile(r'<wp:post_id>\s*(\d+)\s*</wp:post_id>')
_CONTENT = re.compile(r'<content:encoded><!\[CDATA\[([\s\S]*?)\]\]></content:encoded>')


def _first_group(match):
    if not match:
        return ''
    return next((g for g in match.groups() if g is not None), '')


def _meta_value(item_xml, key):
    """Lê o valor numérico de um ``wp:postmeta`` pela chave (ex.: ``course_id``)."""
    pattern = (
        r'<wp:meta_key>(?:<!\[CDATA\[)?' + re.escape(key) + r'(?:\]\]>)?</wp:meta_key>\s*'
        r'<wp:meta_value>(?:<!\[CDATA\[)?(\d+)(?:\]\]>)?</wp:meta_value>'
    )
    match = re.search(pattern, item_xml)
    return match.group(1) if match else ''


def extract_export_items(xml_content):
    """Extrai os itens brutos (cursos, módulos e aulas) de uma exportação do WordPress.

    A varredura é tolerante: cada bloco ``<item>`` é lido com expressões regulares,
    sem validação de esquema. Itens sem título ou com um tipo de post desconhecido
    são descartados silenciosamente, e um documento malformado nunca gera exceção.

    Args:
        xml_content (str): O texto completo da exportação XML.

    Returns:
        list: Uma lista de ``RawExportItem`` na ordem em que aparecem no documento.
    """
    items = []
    for item_match in _ITEM.finditer(xml_content or ''):
        item_xml = item_match.group(1)

        kind = POST_TYPES.get(_first_group(_POST_TYPE.search(item_xml)).strip())
        title = _first_group(_TITLE.search(item_xml)).strip()
        if not kind or not title:
            continue

        content_match = _CONTENT.search(item_xml)
        try:
            item = RawExportItem(
                wp_id=_first_group(_POST_ID.search(item_xml)),
                kind=kind,
                raw_title=title,
                raw_content=content_match.group(1) if content_match else '',
                course_ref_id=_meta_value(item_xml, 'course_id'),
                parent_module_ref_id=_meta_value(item_xml, 'lesson_id') if kind == 'lesson' else '',
            )
        except ValidationError:
            continue
        items.append(item)
    return items


def build_course_lookup(items):
    """Monta o mapa ``wp_course_id -> título`` a partir dos itens de curso.

    Args:
        items (list): Itens brutos devolvidos por :func:`extract_export_items`.

    Returns:
        dict: IDs de curso do WordPress mapeados para o título decodificado.
    """
    courses = {}
    for item in items:
        if item.kind == 'course' and item.wp_id:
            courses[item.wp_id] = decode_entities(item.raw_title)
    return courses


def parse_wordpress_export(xml_content):
    """Converte uma exportação do LearnDash em módulos e aulas prontos para conciliação.

    Cursos, módulos e aulas podem aparecer em qualquer ordem no documento, por isso
    a tabela de cursos é resolvida numa segunda passagem sobre os itens já extraídos.
    O normalizador de conteúdo e o extrator de mídia leem, cada um, o mesmo conteúdo
    bruto do item. Módulos e aulas sem ``course_id`` não podem ser atribuídos a um
    curso e são ignorados.

    Args:
        xml_content (str): O texto completo da exportação XML.

    Returns:
        ParsedExport: Módulos, aulas e a tabela de cursos do WordPress.
    """
    items = extract_export_items(xml_content)
    wp_courses = build_course_lookup(items)

    modules = []
    lessons = []
    for item in items:
        if item.kind == 'course' or not item.course_ref_id:
            continue

        title = decode_entities(item.raw_title)
        media = extract_media(item.raw_content)

        if item.kind == 'module':
            modules.append(ParsedModule(
                title=title,
                wp_id=item.wp_id,
                wp_course_id=item.course_ref_id,
                formatted_description=format_content(item.raw_content),
                youtube_urls=media.youtube_urls,
                spotify_urls=media.spotify_urls,
                order=len(modules),
            ))
        else:
            lessons.append(ParsedLesson(
                title=title,
                wp_id=item.wp_id,
                wp_course_id=item.course_ref_id,
                wp_module_id=item.parent_module_ref_id,
                formatted_content=format_content(item.raw_content),
                video_url=pick_primary_video(media),
                soundslice_url=media.soundslice_url,
                order=len(lessons),
            ))

    return ParsedExport(modules=modules, lessons=lessons, wp_courses=wp_courses)
