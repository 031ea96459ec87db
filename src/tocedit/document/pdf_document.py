from datetime import datetime, timezone
from io import BytesIO
from typing import Any, Dict, List, Optional

from globalog import LOG
from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PyPdfError
from PyPDF2.generic import IndirectObject, NameObject, PdfObject

from tocedit.document.page_ops import is_pdf
from tocedit.exceptions import InvalidInputFileError


PARSE_ERRORS = (PyPdfError, ValueError, KeyError, IndexError, TypeError, AttributeError)

# The writer owns its own page tree
WRITER_CATALOG_KEYS = ("/Type", "/Pages")


def format_pdf_date(moment: datetime) -> str:
    """
    Format a datetime as a PDF date string, e.g. D:20240101120000+00'00'.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("D:%Y%m%d%H%M%S+00'00'")


class PdfDocument:
    """
    In-memory PDF object graph that can be mutated and encoded back to bytes.

    The pages of the source document are copied into a fresh PyPDF2 writer, followed
    by every other catalog entry (page labels, named destinations, page mode, an
    existing outline...). References to pages inside those entries are mapped onto
    the copied pages. Indirect objects added through this class live in the
    writer's object space and are emitted by encode().
    """

    def __init__(self, writer: PdfWriter, page_refs: List[IndirectObject]) -> None:
        self._writer = writer
        self._page_refs = page_refs

    @classmethod
    def from_bytes(cls, pdf_bytes: bytes) -> "PdfDocument":
        """
        Parse PDF bytes into a mutable document.

        Args:
            pdf_bytes: The uploaded file data.

        Returns:
            PdfDocument: The parsed document.

        Raises:
            InvalidInputFileError: If the bytes are not a readable PDF.
        """
        if not pdf_bytes or not is_pdf(pdf_bytes):
            raise InvalidInputFileError("Input is not a PDF file (missing %PDF header).")

        try:
            reader = PdfReader(BytesIO(pdf_bytes))
            if reader.is_encrypted and not reader.decrypt(""):
                raise InvalidInputFileError("Input PDF is encrypted and cannot be opened.")

            writer = PdfWriter()
            page_refs = []
            for page in reader.pages:
                added = writer.add_page(page)
                page_refs.append(added.indirect_reference)

            _copy_catalog(reader, writer)

            metadata = _readable_metadata(reader)
            if metadata:
                writer.add_metadata(metadata)
        except InvalidInputFileError:
            raise
        except PARSE_ERRORS as exc:
            LOG.error("Failed to parse input PDF", exc_info=exc)
            raise InvalidInputFileError(f"Input PDF could not be parsed: {exc}") from exc

        LOG.info(f"Loaded PDF with {len(page_refs)} pages.")
        return cls(writer, page_refs)

    @classmethod
    def from_file(cls, path: str) -> "PdfDocument":
        with open(path, "rb") as f:
            return cls.from_bytes(f.read())

    def page_count(self) -> int:
        return len(self._page_refs)

    def get_page(self, index: int) -> IndirectObject:
        """
        Return the indirect reference of the page at a 0-based index.

        Raises:
            IndexError: If the index is outside the document.
        """
        if index < 0 or index >= len(self._page_refs):
            raise IndexError(f"Page index {index} out of range for {len(self._page_refs)} pages")
        return self._page_refs[index]

    def add_indirect_object(self, value: PdfObject) -> IndirectObject:
        """
        Register an object in the document's indirect-object space.

        The object is stored by identity, so it may still be filled in after its
        reference has been handed out.
        """
        return self._writer._add_object(value)

    def resolve(self, ref: IndirectObject) -> PdfObject:
        return self._writer.get_object(ref)

    def set_catalog_field(self, key: str, value: PdfObject) -> None:
        self._writer._root_object[NameObject(key)] = value

    def get_catalog_field(self, key: str) -> Optional[PdfObject]:
        return self._writer._root_object.get(NameObject(key))

    def catalog_keys(self) -> List[str]:
        return sorted(str(key) for key in self._writer._root_object.keys())

    def update_metadata(
        self,
        title: Optional[str] = None,
        producer: Optional[str] = None,
        creator: Optional[str] = None,
        modified: Optional[datetime] = None,
    ) -> None:
        """
        Overwrite the document information fields that are given.

        Args:
            title: Document title.
            producer: Producing application.
            creator: Creating application.
            modified: Modification timestamp (defaults to now).
        """
        infos: Dict[str, str] = {
            "/ModDate": format_pdf_date(modified or datetime.now(timezone.utc)),
        }
        if title is not None:
            infos["/Title"] = title
        if producer is not None:
            infos["/Producer"] = producer
        if creator is not None:
            infos["/Creator"] = creator
        self._writer.add_metadata(infos)

    def encode(self) -> bytes:
        buf = BytesIO()
        self._writer.write(buf)
        return buf.getvalue()


def _copy_catalog(reader: PdfReader, writer: PdfWriter) -> None:
    """
    Clone the source catalog entries into the writer.

    Must run after the pages were added: cloning translates references to source
    pages into the writer's copies instead of duplicating them.
    """
    source_root = reader.trailer["/Root"]
    for key in source_root:
        if key in WRITER_CATALOG_KEYS:
            continue
        try:
            writer._root_object[NameObject(key)] = source_root.raw_get(key).clone(writer)
        except PARSE_ERRORS as exc:
            LOG.warning(f"Dropping unreadable catalog entry {key}: {exc}")


def _readable_metadata(reader: PdfReader) -> Dict[str, Any]:
    """Collect the document information entries that are plain strings."""
    metadata = reader.metadata
    if not metadata:
        return {}
    result = {}
    for key, value in metadata.items():
        if isinstance(value, IndirectObject):
            value = value.get_object()
        if isinstance(value, str) and not isinstance(value, NameObject):
            result[key] = value
    return result
