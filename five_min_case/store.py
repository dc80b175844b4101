"""
Persistence adapter for the hosted document store (Appwrite REST API).

Records are stored as opaque blobs: each document holds the record ``id``,
a ``type`` tag and the JSON-serialized record in ``data``. Every write
carries public-read and server-role write permissions.
"""

import json
import re
import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterator, List, Any, Optional, Sequence, Set, Union

from .utils.base import BaseFetcher
from .utils.data_models import CaseRecord, NewsItem
from .utils.exceptions import (
    PipelineError,
    ConflictError,
    DataNotFoundError,
    ParsingError,
    StoreError,
)
from .utils.helpers import setup_logger, to_iso, utc_now, validate_date

logger = setup_logger("five_min_case.store")

PAGE_SIZE = 100
PUBLIC_READ = 'read("any")'


def document_id_for(record_id: str) -> str:
    """
    Map a record id onto a valid document id.

    Document ids are at most 36 characters of ``[A-Za-z0-9._-]`` and cannot
    start with a special character.
    """
    doc_id = re.sub(r"[^A-Za-z0-9._-]", "_", str(record_id))
    doc_id = re.sub(r"^[^A-Za-z0-9]+", "", doc_id)[:36]
    if not doc_id:
        doc_id = hashlib.sha256(str(record_id).encode("utf-8")).hexdigest()[:36]
    return doc_id


def record_type(record: Union[CaseRecord, NewsItem]) -> str:
    return "case" if isinstance(record, CaseRecord) else "news"


@dataclass
class PersistResult:
    created: int = 0
    duplicates: int = 0
    failed: int = 0


@dataclass
class PublishResult:
    updated: int = 0
    created: int = 0
    failed: int = 0


@dataclass
class PruneResult:
    scanned: int = 0
    expired: int = 0
    deleted: int = 0
    failed: int = 0
    skipped: int = 0


@dataclass
class BackfillResult:
    processed: int = 0
    updated: int = 0
    failed: int = 0


class DocumentStore(BaseFetcher):
    """
    Client for one database of the document store.

    A flat ``request_delay`` is slept after every write, update, delete and
    permission update.
    """

    def __init__(
        self,
        endpoint: str,
        project_id: str,
        api_key: str,
        database_id: str,
        server_role: str = "team:server",
        page_size: int = PAGE_SIZE,
        request_delay: float = 0.1,
        clock: Callable = utc_now,
        **kwargs,
    ):
        """
        Args:
            endpoint: API endpoint, e.g. ``https://cloud.appwrite.io/v1``
            project_id: Project id
            api_key: Server API key
            database_id: Database holding the collections
            server_role: Role granted write permission on every document
            page_size: Documents per list call
            request_delay: Seconds slept after each mutating call
            clock: Returns the current UTC time
        """
        super().__init__(request_delay=request_delay, **kwargs)
        self.endpoint = endpoint.rstrip("/")
        self.database_id = database_id
        self.server_role = server_role
        self.page_size = page_size
        self.clock = clock
        self.session.headers.update(
            {
                "X-Appwrite-Project": project_id,
                "X-Appwrite-Key": api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )

    @property
    def base_url(self) -> str:
        return self.endpoint

    @property
    def permissions(self) -> List[str]:
        return [PUBLIC_READ, f'write("{self.server_role}")']

    def _documents_url(self, collection_id: str, document_id: str = None) -> str:
        url = (
            f"{self.endpoint}/databases/{self.database_id}"
            f"/collections/{collection_id}/documents"
        )
        if document_id:
            url = f"{url}/{document_id}"
        return url

    def _attributes(self, record: Union[CaseRecord, NewsItem]) -> Dict[str, str]:
        if isinstance(record, CaseRecord):
            stamp = to_iso(self.clock())
            record.created_at = record.created_at or stamp
            record.updated_at = stamp
        return {
            "id": record.id,
            "type": record_type(record),
            "data": json.dumps(record.to_dict(), ensure_ascii=False),
        }

    def write(self, collection_id: str, record: Union[CaseRecord, NewsItem]) -> bool:
        """
        Create a document for a record.

        Returns:
            True if a document was created, False if it already existed

        Raises:
            StoreError: For any failure other than an existing document
        """
        payload = {
            "documentId": document_id_for(record.id),
            "data": self._attributes(record),
            "permissions": self.permissions,
        }

        try:
            self._make_request(self._documents_url(collection_id), method="POST", json=payload)
        except ConflictError:
            self.logger.debug(f"Document {payload['documentId']} already exists")
            return False
        except PipelineError as e:
            raise StoreError(
                f"Failed to write {record.id}: {e.message}",
                url=e.url,
                status_code=e.status_code,
            ) from e
        finally:
            self._pause()

        return True

    def update(self, collection_id: str, record: Union[CaseRecord, NewsItem]) -> bool:
        """
        Replace the stored payload of a record, creating the document if it
        does not exist yet.

        Returns:
            True if an existing document was updated, False if it was created

        Raises:
            StoreError: If neither the update nor the create succeeds
        """
        document_id = document_id_for(record.id)
        try:
            self._make_request(
                self._documents_url(collection_id, document_id),
                method="PATCH",
                json={"data": self._attributes(record), "permissions": self.permissions},
            )
        except DataNotFoundError:
            self.logger.debug(f"Document {document_id} not found, creating it")
        except PipelineError as e:
            raise StoreError(
                f"Failed to update {record.id}: {e.message}",
                url=e.url,
                status_code=e.status_code,
            ) from e
        else:
            return True
        finally:
            self._pause()

        self.write(collection_id, record)
        return False

    def list_page(self, collection_id: str, offset: int = 0) -> List[Dict[str, Any]]:
        """
        List one page of documents.

        Raises:
            StoreError: If the page cannot be read
        """
        queries = [
            json.dumps({"method": "limit", "values": [self.page_size]}),
            json.dumps({"method": "offset", "values": [offset]}),
        ]
        url = self._documents_url(collection_id)
        try:
            data = self._get_json(url, params={"queries[]": queries})
        except PipelineError as e:
            raise StoreError(
                f"Failed to list {collection_id} at offset {offset}: {e.message}",
                url=url,
                status_code=e.status_code,
            ) from e

        documents = data.get("documents") if isinstance(data, dict) else None
        if not isinstance(documents, list):
            raise StoreError(f"Unexpected list response for {collection_id}", url=url)
        return documents

    def list_all(self, collection_id: str, offset: int = 0) -> Iterator[Dict[str, Any]]:
        """
        Yield every document, page by page, starting at ``offset``.

        Paging stops at the first page shorter than ``page_size``.
        """
        while True:
            documents = self.list_page(collection_id, offset)
            yield from documents
            if len(documents) < self.page_size:
                break
            offset += len(documents)

    def delete(self, collection_id: str, document_id: str) -> bool:
        """
        Delete a document.

        Returns:
            True if deleted, False if it was already gone

        Raises:
            StoreError: For any other failure
        """
        try:
            self._make_request(
                self._documents_url(collection_id, document_id), method="DELETE"
            )
        except DataNotFoundError:
            self.logger.debug(f"Document {document_id} was already deleted")
            return False
        except PipelineError as e:
            raise StoreError(
                f"Failed to delete {document_id}: {e.message}",
                url=e.url,
                status_code=e.status_code,
            ) from e
        finally:
            self._pause()
        return True

    def update_permissions(
        self, collection_id: str, document_id: str, permissions: Sequence[str]
    ) -> None:
        """Replace a document's permissions, leaving its data untouched."""
        try:
            self._make_request(
                self._documents_url(collection_id, document_id),
                method="PATCH",
                json={"data": {}, "permissions": list(permissions)},
            )
        except PipelineError as e:
            raise StoreError(
                f"Failed to update permissions of {document_id}: {e.message}",
                url=e.url,
                status_code=e.status_code,
            ) from e
        finally:
            self._pause()

    def existing_urls(self, collection_id: str) -> Set[str]:
        """URLs of every stored record; undecodable documents are skipped."""
        urls = set()
        for document in self.list_all(collection_id):
            try:
                url = decode_document(document).get("url")
            except ParsingError as e:
                self.logger.warning(str(e))
                continue
            if url:
                urls.add(url)
        self.logger.info(f"{len(urls)} URLs already stored in {collection_id}")
        return urls

    def prune_older_than(
        self,
        collection_id: str,
        retention_days: int,
        date_field: str,
        now: Optional[datetime] = None,
    ) -> PruneResult:
        """
        Delete documents whose ``date_field`` is older than the cutoff.

        The cutoff is ``now - retention_days``; a record exactly at the
        cutoff is kept. Expired ids are collected over all pages before
        anything is deleted so offsets stay stable. A failed delete is logged
        and the sweep continues.
        """
        now = validate_date(now or self.clock())
        cutoff = now - timedelta(days=retention_days)
        self.logger.info(
            f"Removing {collection_id} documents older than {retention_days} days "
            f"(cutoff {to_iso(cutoff)})"
        )

        result = PruneResult()
        expired = []
        for document in self.list_all(collection_id):
            result.scanned += 1
            try:
                payload = decode_document(document)
                published = validate_date(payload.get(date_field))
            except (ParsingError, ValueError) as e:
                self.logger.warning(f"Skipping document {document.get('$id')}: {str(e)}")
                result.skipped += 1
                continue
            if published is None:
                self.logger.warning(f"Document {document.get('$id')} has no {date_field}")
                result.skipped += 1
                continue
            if published < cutoff:
                self.logger.info(
                    f"Marking for deletion: {payload.get('title') or payload.get('id')} "
                    f"({to_iso(published)})"
                )
                expired.append(document["$id"])

        result.expired = len(expired)
        for document_id in expired:
            try:
                if self.delete(collection_id, document_id):
                    result.deleted += 1
            except StoreError as e:
                self.logger.error(str(e))
                result.failed += 1

        self.logger.info(
            f"Cleanup complete. Deleted {result.deleted} of {result.expired} expired documents"
        )
        return result

    def backfill_permissions(self, collection_id: str) -> BackfillResult:
        """Give public-read and server-write to documents lacking public read."""
        result = BackfillResult()
        for document in self.list_all(collection_id):
            result.processed += 1
            if PUBLIC_READ in (document.get("$permissions") or []):
                continue
            try:
                self.update_permissions(collection_id, document["$id"], self.permissions)
                result.updated += 1
                self.logger.info(f"Updated permissions for doc {document['$id']}")
            except StoreError as e:
                self.logger.error(str(e))
                result.failed += 1

        self.logger.info(
            f"Backfill complete. Processed: {result.processed}, Updated: {result.updated}"
        )
        return result


def decode_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Load the record payload of a stored document.

    Raises:
        ParsingError: If ``data`` is missing or not a JSON object
    """
    doc_id = document.get("$id") if isinstance(document, dict) else None
    try:
        payload = json.loads(document["data"])
    except (KeyError, TypeError, ValueError) as e:
        raise ParsingError(f"Failed to parse document {doc_id}: {str(e)}") from e
    if not isinstance(payload, dict):
        raise ParsingError(f"Document {doc_id} does not hold an object")
    return payload


def persist_records(
    store: DocumentStore, collection_id: str, records: Sequence[Union[CaseRecord, NewsItem]]
) -> PersistResult:
    """
    Write records one at a time.

    Existing documents count as duplicates; other failures are logged and
    counted without stopping the run.
    """
    result = PersistResult()
    for record in records:
        try:
            if store.write(collection_id, record):
                result.created += 1
            else:
                result.duplicates += 1
        except StoreError as e:
            logger.error(str(e))
            result.failed += 1

    logger.info(
        f"Stored {result.created} new records in {collection_id} "
        f"({result.duplicates} already present, {result.failed} failed)"
    )
    return result


def publish_records(
    store: DocumentStore, collection_id: str, records: Sequence[Union[CaseRecord, NewsItem]]
) -> PublishResult:
    """
    Push the current state of records, replacing stored payloads.

    Used after summarizing so stored cases carry their summaries.
    """
    result = PublishResult()
    for record in records:
        try:
            if store.update(collection_id, record):
                result.updated += 1
            else:
                result.created += 1
        except StoreError as e:
            logger.error(str(e))
            result.failed += 1

    logger.info(
        f"Published {result.updated + result.created} records to {collection_id} "
        f"({result.updated} updated, {result.created} created, {result.failed} failed)"
    )
    return result
