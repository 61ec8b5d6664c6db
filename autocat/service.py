"""
Categorization service: file path -> content extraction -> corpus -> engine.
"""

from pathlib import Path
from typing import Iterable, Optional, Union

from autocat.corpus import AnnotationCorpusReader, CategoryDirectory
from autocat.engine import CategorizationEngine
from autocat.extraction import ContentExtractionService, detect_file_type
from autocat.logging_config import (
    generate_correlation_id,
    get_correlation_id,
    get_logger,
    reset_correlation_id,
    set_correlation_id,
)
from autocat.models import AnalysisRequest, AnalysisResult, FileType, ReferenceImage

logger = get_logger(__name__)


class CategorizationService:
    """Categorizes files on disk against an annotation corpus."""

    def __init__(
        self,
        extractor: ContentExtractionService,
        corpus_reader: AnnotationCorpusReader,
        directory: CategoryDirectory,
        engine: Optional[CategorizationEngine] = None,
    ):
        self.extractor = extractor
        self.corpus_reader = corpus_reader
        self.directory = directory
        self.engine = engine or CategorizationEngine()

    def categorize_file(
        self,
        path: Union[str, Path],
        file_type: Optional[FileType] = None,
        mime_type: Optional[str] = None,
        reference_images: Iterable[ReferenceImage] = (),
    ) -> AnalysisResult:
        """
        Categorize one file.

        Args:
            path: File to categorize
            file_type: Modality; detected from mime_type / file name when omitted
            mime_type: MIME type reported by the uploader
            reference_images: Previously analysed images for similar-image matches

        Returns:
            AnalysisResult of the engine

        Raises:
            UnsupportedFileTypeError: the file is not an image, PDF, JSON or audio file
            ContentUnavailableError: the file is missing or corrupt
            CorpusUnavailableError: the corpus could not be read
        """
        token = None if get_correlation_id() else set_correlation_id(generate_correlation_id())
        try:
            return self._categorize(Path(path), file_type, mime_type, reference_images)
        finally:
            if token is not None:
                reset_correlation_id(token)

    def _categorize(
        self,
        path: Path,
        file_type: Optional[FileType],
        mime_type: Optional[str],
        reference_images: Iterable[ReferenceImage],
    ) -> AnalysisResult:
        file_type = file_type or detect_file_type(path.name, mime_type)

        content = self.extractor.extract(path, file_type)
        records = self.corpus_reader.read_records()

        request = AnalysisRequest(
            file_type=file_type,
            content=content,
            corpus=records,
            categories=self.directory.categories,
            reference_images=list(reference_images),
        )
        result = self.engine.analyze(request)
        result.raw["filename"] = path.name
        logger.info(f"{path.name} -> {result.dest_path}")
        return result
