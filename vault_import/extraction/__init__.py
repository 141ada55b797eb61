from vault_import.extraction.base import BaseExtractor
from vault_import.extraction.extractor import Extractor
from vault_import.extraction.factory import ExtractorFactory

__all__ = ["BaseExtractor", "Extractor", "ExtractorFactory"]
