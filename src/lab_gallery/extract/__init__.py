from lab_gallery.extract.metadata import (
    GENERIC_DESCRIPTION,
    PieceMetadata,
    extract_metadata,
    title_from_filename,
)

__all__ = [
    "GENERIC_DESCRIPTION",
    "PieceMetadata",
    "extract_metadata",
    "title_from_filename",
]
