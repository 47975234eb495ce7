from .errors import (
    EncodeError,
    InvalidCollectionError,
    InvalidTagError,
    InvalidVersionError,
    IPPError,
    IPPIOError,
    ParseError,
    RequestError,
)
from .tags import DelimiterTag, IPPVersion, Operation, StatusCode, ValueTag
from .value import (
    Boolean,
    Charset,
    Collection,
    DateTime,
    Enum,
    Integer,
    IPPValue,
    Keyword,
    ListOf,
    MemberAttrName,
    MimeMediaType,
    NameWithoutLanguage,
    NaturalLanguage,
    OctetString,
    Other,
    RangeOfInteger,
    Resolution,
    TextWithoutLanguage,
    Uri,
    to_ipp_value,
)
from .header import IPPHeader
from .attribute import IPPAttribute, IPPAttributes
from .parser import IPPParser, IPPParseResult, parse
from .message import IPPMessage
