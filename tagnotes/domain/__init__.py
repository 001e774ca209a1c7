"""Domain layer: entities, value objects and pure tag/record logic."""

from .duplicates import RecordDuplicateChecker
from .errors import DomainError, ErrorCode
from .ids import RecordId, TagId, generate_id, is_valid_id
from .matcher import RecordMatcher, SearchQuery
from .normalizer import TagNormalizer, TagNormalizerConfig, strip_diacritics
from .parser import TagParser
from .record import Record, RecordContent, RecordFactory, utc_now
from .result import Err, Ok, Result
from .tag import Tag, TagFactory
from .validator import TagValidationResult, TagValidator

__all__ = [
    "DomainError",
    "ErrorCode",
    "Err",
    "Ok",
    "Result",
    "RecordId",
    "TagId",
    "generate_id",
    "is_valid_id",
    "Tag",
    "TagFactory",
    "Record",
    "RecordContent",
    "RecordFactory",
    "utc_now",
    "TagNormalizer",
    "TagNormalizerConfig",
    "strip_diacritics",
    "TagValidator",
    "TagValidationResult",
    "TagParser",
    "SearchQuery",
    "RecordMatcher",
    "RecordDuplicateChecker",
]
