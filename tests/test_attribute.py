import io

import pytest

from ippcodec.codec.attribute import (
    ATTRIBUTES_CHARSET,
    ATTRIBUTES_NATURAL_LANGUAGE,
    PRINTER_URI,
    RESPONSE_HEADER_ATTRS,
    IPPAttribute,
    IPPAttributes,
)
from ippcodec.codec.errors import RequestError
from ippcodec.codec.parser import IPPParser
from ippcodec.codec.tags import DelimiterTag
from ippcodec.codec.value import (
    Charset,
    Collection,
    Integer,
    Keyword,
    ListOf,
    MimeMediaType,
    NameWithoutLanguage,
    NaturalLanguage,
    Uri,
)

OPERATION = DelimiterTag.OPERATION_ATTRIBUTES
JOB = DelimiterTag.JOB_ATTRIBUTES
PRINTER = DelimiterTag.PRINTER_ATTRIBUTES

def _entry(tag: int, name: str, value: bytes = b"") -> bytes:
    name_bytes = name.encode('utf-8')
    return (
        bytes([tag])
        + len(name_bytes).to_bytes(2, 'big') + name_bytes
        + len(value).to_bytes(2, 'big') + value
    )

def _with_headers(attributes: IPPAttributes) -> IPPAttributes:
    attributes.add(OPERATION, IPPAttribute(ATTRIBUTES_CHARSET, Charset("utf-8")))
    attributes.add(OPERATION, IPPAttribute(ATTRIBUTES_NATURAL_LANGUAGE, NaturalLanguage("en")))
    attributes.add(OPERATION, IPPAttribute(PRINTER_URI, Uri("ipp://localhost/printer")))
    return attributes

class TestIPPAttribute:

    # Etiqueta, nombre y valor en el formato del cable
    def test_write(self):
        stream = io.BytesIO()
        written = IPPAttribute("job-name", NameWithoutLanguage("Recibo")).write(stream)
        assert stream.getvalue() == _entry(0x42, "job-name", b"Recibo")
        assert written == len(stream.getvalue())

    # Un arreglo repite la etiqueta con nombre vacío
    def test_write_list(self):
        stream = io.BytesIO()
        IPPAttribute("sides-supported", ListOf([Keyword("one-sided"), Keyword("two-sided")])).write(stream)
        assert stream.getvalue() == (
            _entry(0x44, "sides-supported", b"one-sided")
            + _entry(0x44, "", b"two-sided")
        )

    def test_equality_and_display(self):
        assert IPPAttribute("a", Integer(1)) == IPPAttribute("a", Integer(1))
        assert IPPAttribute("a", Integer(1)) != IPPAttribute("b", Integer(1))
        assert str(IPPAttribute("a", ListOf([Integer(1), Integer(2)]))) == "a: [1, 2]"


class TestIPPAttributes:

    # Ausencia de grupo o nombre no es un error
    def test_lookup_missing(self):
        attributes = IPPAttributes()
        assert attributes.get(JOB, "job-id") is None
        assert attributes.get_group(JOB) == {}
        assert not attributes.has_group(JOB)
        assert len(attributes) == 0

    # Reemplazo por nombre dentro del grupo conservando la posición
    def test_add_replaces_by_name(self):
        attributes = IPPAttributes()
        attributes.add(JOB, IPPAttribute("a", Integer(1)))
        attributes.add(JOB, IPPAttribute("b", Integer(2)))
        attributes.add(JOB, IPPAttribute("a", Integer(3)))
        assert list(attributes.get_group(JOB)) == ["a", "b"]
        assert attributes.get(JOB, "a").value == Integer(3)
        assert len(attributes) == 2

    # El mismo nombre en grupos distintos son atributos distintos
    def test_groups_are_independent(self):
        attributes = IPPAttributes()
        attributes.add(JOB, IPPAttribute("x", Integer(1)))
        attributes.add(PRINTER, IPPAttribute("x", Integer(2)))
        assert attributes.get(JOB, "x").value == Integer(1)
        assert attributes.get(PRINTER, "x").value == Integer(2)
        assert attributes.groups() == [JOB, PRINTER]

    # Eliminar el último atributo elimina el grupo
    def test_remove(self):
        attributes = IPPAttributes()
        attributes.add(JOB, IPPAttribute("x", Integer(1)))
        assert attributes.remove(JOB, "x") == IPPAttribute("x", Integer(1))
        assert not attributes.has_group(JOB)
        assert attributes.remove(JOB, "x") is None

    # Orden: operación con encabezados obligatorios primero, luego trabajo e impresora
    def test_write_order(self):
        attributes = IPPAttributes()
        attributes.add(PRINTER, IPPAttribute("printer-name", NameWithoutLanguage("pos")))
        attributes.add(JOB, IPPAttribute("copies", Integer(2)))
        attributes.add(OPERATION, IPPAttribute("document-format", MimeMediaType("application/pdf")))
        attributes.add(OPERATION, IPPAttribute(PRINTER_URI, Uri("ipp://h/p")))
        attributes.add(OPERATION, IPPAttribute(ATTRIBUTES_NATURAL_LANGUAGE, NaturalLanguage("en")))
        attributes.add(OPERATION, IPPAttribute(ATTRIBUTES_CHARSET, Charset("utf-8")))

        stream = io.BytesIO()
        written = attributes.write(stream)
        expected = (
            bytes([0x01])
            + _entry(0x47, "attributes-charset", b"utf-8")
            + _entry(0x48, "attributes-natural-language", b"en")
            + _entry(0x45, "printer-uri", b"ipp://h/p")
            + _entry(0x49, "document-format", b"application/pdf")
            + bytes([0x02])
            + _entry(0x21, "copies", (2).to_bytes(4, 'big'))
            + bytes([0x04])
            + _entry(0x42, "printer-name", b"pos")
            + bytes([0x03])
        )
        assert stream.getvalue() == expected
        assert written == len(expected)

    # Solo atributos de trabajo: error de solicitud y nada escrito
    def test_write_without_operation_headers(self):
        attributes = IPPAttributes()
        attributes.add(JOB, IPPAttribute("job-name", NameWithoutLanguage("x")))
        stream = io.BytesIO()
        with pytest.raises(RequestError) as excinfo:
            attributes.write(stream)
        assert excinfo.value.attribute == ATTRIBUTES_CHARSET
        assert stream.getvalue() == b""

    # Falta attributes-natural-language
    def test_write_missing_natural_language(self):
        attributes = IPPAttributes()
        attributes.add(OPERATION, IPPAttribute(ATTRIBUTES_CHARSET, Charset("utf-8")))
        attributes.add(OPERATION, IPPAttribute(PRINTER_URI, Uri("ipp://h/p")))
        stream = io.BytesIO()
        with pytest.raises(RequestError) as excinfo:
            attributes.write(stream)
        assert excinfo.value.attribute == ATTRIBUTES_NATURAL_LANGUAGE
        assert stream.getvalue() == b""

    # Respuestas no requieren printer-uri
    def test_write_response_headers(self):
        attributes = IPPAttributes()
        attributes.add(OPERATION, IPPAttribute(ATTRIBUTES_CHARSET, Charset("utf-8")))
        attributes.add(OPERATION, IPPAttribute(ATTRIBUTES_NATURAL_LANGUAGE, NaturalLanguage("en")))
        stream = io.BytesIO()
        attributes.write(stream, RESPONSE_HEADER_ATTRS)
        assert stream.getvalue().endswith(bytes([0x03]))

    # Lo escrito se vuelve a parsear igual, incluidas colecciones y arreglos
    def test_write_then_parse(self):
        attributes = _with_headers(IPPAttributes())
        attributes.add(JOB, IPPAttribute("media-col", Collection([Keyword("iso_a4_210x297mm"), Integer(3)])))
        attributes.add(PRINTER, IPPAttribute("sides-supported", ListOf([Keyword("one-sided"), Keyword("two-sided")])))
        attributes.add(PRINTER, IPPAttribute("copies-default", Integer(1)))

        stream = io.BytesIO(bytes([1, 1, 0, 2, 0, 0, 0, 1]))
        stream.seek(0, io.SEEK_END)
        attributes.write(stream)
        stream.seek(0)
        parsed = IPPParser(stream).parse().attributes

        for group in (OPERATION, JOB, PRINTER):
            assert parsed.get_group(group) == attributes.get_group(group)
            assert list(parsed.get_group(group)) == list(attributes.get_group(group))

    # Cada aparición de un grupo se escribe con su propio delimitador
    def test_write_repeated_groups(self):
        attributes = IPPAttributes()
        attributes.add(OPERATION, IPPAttribute(ATTRIBUTES_CHARSET, Charset("utf-8")))
        attributes.add(OPERATION, IPPAttribute(ATTRIBUTES_NATURAL_LANGUAGE, NaturalLanguage("en")))
        attributes.start_group(JOB)
        attributes.add(JOB, IPPAttribute("job-id", Integer(1)))
        attributes.start_group(JOB)
        attributes.add(JOB, IPPAttribute("job-id", Integer(2)))

        stream = io.BytesIO()
        attributes.write(stream, RESPONSE_HEADER_ATTRS)
        assert stream.getvalue().endswith(
            bytes([0x02]) + _entry(0x21, "job-id", (1).to_bytes(4, 'big'))
            + bytes([0x02]) + _entry(0x21, "job-id", (2).to_bytes(4, 'big'))
            + bytes([0x03])
        )

        stream.seek(0)
        parsed = IPPParser(io.BytesIO(bytes([1, 1, 0, 0, 0, 0, 0, 1]) + stream.getvalue())).parse().attributes
        assert parsed.groups_of(JOB) == attributes.groups_of(JOB)

    # Eliminar un nombre lo quita de todas las apariciones del grupo
    def test_remove_from_repeated_groups(self):
        attributes = IPPAttributes()
        first = IPPAttribute("job-id", Integer(1))
        second = IPPAttribute("job-id", Integer(2))
        attributes.add(JOB, first)
        attributes.start_group(JOB)
        attributes.add(JOB, second)
        attributes.add(JOB, IPPAttribute("job-name", NameWithoutLanguage("dos")))
        assert len(attributes) == 3
        assert attributes.remove(JOB, "job-id") is second
        assert attributes.groups_of(JOB) == [{"job-name": IPPAttribute("job-name", NameWithoutLanguage("dos"))}]
        assert len(attributes) == 1
        assert attributes.has_group(JOB)
        attributes.remove(JOB, "job-name")
        assert attributes.groups_of(JOB) == []
        assert not attributes.has_group(JOB)
