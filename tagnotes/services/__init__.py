"""Application use-cases: record orchestration, search, tags, export and import."""

from .create_record import CreateRecordRequest, CreateRecordResponse, CreateRecordUseCase
from .delete_record import DeleteRecordRequest, DeleteRecordResponse, DeleteRecordUseCase
from .dtos import (
    ExportDTO,
    ExportMetadata,
    ImportResultDTO,
    ImportSummary,
    ImportWarning,
    PaginationDTO,
    RecordDTO,
    SearchResultDTO,
    TagCloudItemDTO,
    TagSuggestionDTO,
)
from .export_data import ExportDataRequest, ExportDataResponse, ExportDataUseCase, portable_record_id
from .import_data import ImportDataUseCase
from .search_records import SearchRecordsRequest, SearchRecordsResponse, SearchRecordsUseCase
from .tag_suggestions import (
    GetTagCloudUseCase,
    GetTagSuggestionsRequest,
    GetTagSuggestionsResponse,
    GetTagSuggestionsUseCase,
)
from .update_record import UpdateRecordRequest, UpdateRecordResponse, UpdateRecordUseCase

__all__ = [
    "CreateRecordUseCase",
    "CreateRecordRequest",
    "CreateRecordResponse",
    "UpdateRecordUseCase",
    "UpdateRecordRequest",
    "UpdateRecordResponse",
    "DeleteRecordUseCase",
    "DeleteRecordRequest",
    "DeleteRecordResponse",
    "SearchRecordsUseCase",
    "SearchRecordsRequest",
    "SearchRecordsResponse",
    "GetTagSuggestionsUseCase",
    "GetTagSuggestionsRequest",
    "GetTagSuggestionsResponse",
    "GetTagCloudUseCase",
    "ExportDataUseCase",
    "ExportDataRequest",
    "ExportDataResponse",
    "portable_record_id",
    "ImportDataUseCase",
    "RecordDTO",
    "SearchResultDTO",
    "PaginationDTO",
    "TagSuggestionDTO",
    "TagCloudItemDTO",
    "ExportDTO",
    "ExportMetadata",
    "ImportResultDTO",
    "ImportSummary",
    "ImportWarning",
]
