"""Document type classification from a cheap first recognition pass.

Identifies the document by matching the text of a top-of-card crop
against configurable keyword lists, with a structural fallback on
ID-number shapes when no keyword survived recognition.
"""

import re

from idscan.models import DocumentType
from idscan.utils.config import ClassifierConfig
from idscan.utils.logger import get_logger

logger = get_logger(__name__)

_VOTER_NUMBER_SHAPE = re.compile(r"\b[A-Z]{2,4}\d{6,10}\b")
_AADHAAR_NUMBER_SHAPE = re.compile(r"\b\d{4}\s?\d{4}\s?\d{4}\b")


class DocumentClassifier:
    """Maps detection-pass text to a document type.

    Voter keywords are checked before Aadhaar keywords: partial
    recognition of "Election Commission" often leaves only a fragment
    such as ``"ELECTION C"``, and that fragment must still win.

    Args:
        config: Keyword lists for each document family.
    """

    def __init__(self, config: ClassifierConfig | None = None) -> None:
        config = config or ClassifierConfig()
        self.voter_keywords = [k.lower() for k in config.voter_keywords]
        self.aadhaar_keywords = [k.lower() for k in config.aadhaar_keywords]

    def classify(self, text: str) -> DocumentType:
        """Classify the document from the detection-pass text.

        Args:
            text: OCR text of the detection crop, possibly truncated.

        Returns:
            The detected document type; ``UNKNOWN`` when nothing matched.
        """
        lowered = text.lower()

        if any(keyword in lowered for keyword in self.voter_keywords):
            doc_type = DocumentType.VOTER
        elif any(keyword in lowered for keyword in self.aadhaar_keywords):
            doc_type = DocumentType.AADHAAR
        elif _VOTER_NUMBER_SHAPE.search(text):
            doc_type = DocumentType.VOTER
        elif _AADHAAR_NUMBER_SHAPE.search(text):
            doc_type = DocumentType.AADHAAR
        else:
            doc_type = DocumentType.UNKNOWN

        logger.info("Detected document type: %s", doc_type.value)
        return doc_type
