"""Ingestion orchestrator: fetch, normalize, resolve, persist, synchronize."""

import json
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from sqlalchemy.orm import Session, sessionmaker

from catalog_sync.config import Settings, settings
from catalog_sync.database import session_scope
from catalog_sync.exceptions import (
    ConfigurationError,
    FeedFetchError,
    RecordPersistenceError,
)
from catalog_sync.models.enums import IngestionRunStatus, RecordOutcome, RecordState
from catalog_sync.models.ingestion_run import IngestionRun
from catalog_sync.schemas.ingestion import IngestionReport, RecordResult, SyncSummary
from catalog_sync.services.child_sync_service import ChildCollectionSynchronizer
from catalog_sync.services.feed_client import FeedClient, build_feed_clients, require_client
from catalog_sync.services.feed_strategies import BaseFeedStrategy, get_strategy
from catalog_sync.services.product_service import ProductService
from catalog_sync.utils.logger import logger

PROGRESS_EVERY = 100


class IngestionService:
    """
    Drives supplier feeds into the catalog.

    Records of one supplier are processed sequentially on one session, each
    in its own transaction: the product row and its replaced children are
    committed together or not at all. Different suppliers run in parallel,
    each on its own session.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        clients: Optional[Dict[str, FeedClient]] = None,
        config: Optional[Settings] = None,
        product_service: Optional[ProductService] = None,
        synchronizer: Optional[ChildCollectionSynchronizer] = None,
    ):
        """
        Initialize the ingestion service.

        Args:
            session_factory: Factory for database sessions
            clients: Feed clients by supplier tag, built from settings if omitted
            config: Settings, defaults to the global settings
            product_service: Product persistence service
            synchronizer: Child collection synchronizer
        """
        self.session_factory = session_factory
        self.settings = config or settings
        self.clients = clients if clients is not None else build_feed_clients(self.settings)
        self.product_service = product_service or ProductService()
        self.synchronizer = synchronizer or ChildCollectionSynchronizer()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        """Close the HTTP sessions of every feed client."""
        for client in self.clients.values():
            client.close()

    def strategy_for(self, source: str) -> BaseFeedStrategy:
        """Return the normalization strategy of a supplier."""
        return get_strategy(source, raw_data_max_bytes=self.settings.raw_data_max_bytes)

    # ------------------------------------------------------------------
    # Record processing
    # ------------------------------------------------------------------

    def ingest(
        self, source: str, raw_records: Iterable[Any], limit: Optional[int] = None
    ) -> IngestionReport:
        """
        Ingest a batch of raw records of one supplier.

        Args:
            source: Supplier tag
            raw_records: Raw records as decoded from the feed
            limit: Only process the first ``limit`` records

        Returns:
            IngestionReport with per-outcome counts and the first error details

        Raises:
            UnknownSupplierError: If no strategy handles the supplier
        """
        strategy = self.strategy_for(source)
        records = list(raw_records)
        if limit is not None:
            records = records[: max(limit, 0)]

        report = IngestionReport(source=source, total=len(records))
        logger.info(f"Ingesting {len(records)} {strategy.label} records")

        with session_scope(self.session_factory) as db:
            run_id = self._start_run(db, source, len(records))
            report.run_id = run_id

            try:
                for index, raw in enumerate(records, start=1):
                    result = self.process_record(db, strategy, raw)
                    self._tally(report, result)
                    if index % PROGRESS_EVERY == 0:
                        logger.info(f"{strategy.label}: {index}/{len(records)} records processed")
            except Exception as e:
                db.rollback()
                logger.error(f"{strategy.label} ingestion aborted: {e}")
                self._finish_run(db, run_id, report, IngestionRunStatus.FAILED, error_message=str(e))
                raise

            self._finish_run(db, run_id, report)

        logger.info(
            f"{strategy.label} ingestion finished: {report.saved_count} saved "
            f"({report.created_count} new, {report.updated_count} updated), "
            f"{report.skipped_count} skipped, {report.error_count} errors"
        )
        return report

    def process_record(self, db: Session, strategy: BaseFeedStrategy, raw: Any) -> RecordResult:
        """
        Take one raw record through normalize, resolve, persist and synchronize.

        A failure at any step is reported as an error and never propagates;
        after normalization it also rolls the record's transaction back.
        """
        state = RecordState.FETCHED
        try:
            record = strategy.normalize(raw)
        except Exception as e:
            code = strategy.identify(raw)
            logger.error(f"Failed to normalize {strategy.label} record {code}: {e} (last state: {state.value})")
            return RecordResult(
                code=code,
                outcome=RecordOutcome.ERRORED,
                state=RecordState.FAILED,
                message=f"normalization failed: {e}",
            )

        state = RecordState.NORMALIZED
        normalized = record.product
        code = normalized.identifying_code
        if code == "unknown":
            code = strategy.identify(raw)
        degradations = [f"{d.field}: {d.reason}" for d in record.degradations]

        if not normalized.name or not normalized.name.strip():
            logger.warning(f"Skipping {strategy.label} record {code}: empty product name")
            return RecordResult(
                code=code,
                outcome=RecordOutcome.SKIPPED,
                state=state,
                message="empty product name after normalization",
                degradations=degradations,
            )

        try:
            existing = self.product_service.resolve_existing(db, normalized)
            state = RecordState.MATCHED if existing else RecordState.NEW
            product, created = self.product_service.save(db, normalized, existing)
            state = RecordState.PERSISTED
            product_id = product.id

            children = self.synchronizer.synchronize(db, product_id, record.variants, record.assets)
            state = RecordState.CHILDREN_SYNCHRONIZED
            db.commit()
        except Exception as e:
            db.rollback()
            error = RecordPersistenceError(code, str(e))
            logger.error(f"Failed to save {strategy.label} record {error} (last state: {state.value})")
            return RecordResult(
                code=code,
                outcome=RecordOutcome.ERRORED,
                state=RecordState.FAILED,
                message=str(e),
                degradations=degradations,
            )

        return RecordResult(
            code=code,
            outcome=RecordOutcome.SAVED,
            state=RecordState.DONE,
            product_id=product_id,
            created=created,
            saved_variants=children.saved_variants,
            saved_assets=children.saved_assets,
            child_errors=[str(error) for error in children.errors],
            degradations=degradations,
        )

    def _tally(self, report: IngestionReport, result: RecordResult) -> None:
        if result.outcome == RecordOutcome.SAVED:
            report.saved_count += 1
            if result.created:
                report.created_count += 1
            else:
                report.updated_count += 1
        elif result.outcome == RecordOutcome.SKIPPED:
            report.skipped_count += 1
        else:
            report.error_count += 1

        if result.degradations:
            report.degraded_count += 1

        if result.outcome != RecordOutcome.SAVED and len(report.details) < self.settings.error_detail_limit:
            report.details.append(result)

    # ------------------------------------------------------------------
    # Run log
    # ------------------------------------------------------------------

    def _start_run(self, db: Session, source: str, total: int) -> int:
        run = IngestionRun(source=source, status=IngestionRunStatus.RUNNING.value, total_records=total)
        db.add(run)
        db.commit()
        return run.id

    def _finish_run(
        self,
        db: Session,
        run_id: int,
        report: IngestionReport,
        status: IngestionRunStatus = IngestionRunStatus.COMPLETED,
        error_message: Optional[str] = None,
    ) -> None:
        run = db.get(IngestionRun, run_id)
        run.saved_count = report.saved_count
        run.skipped_count = report.skipped_count
        run.error_count = report.error_count
        run.finish(
            status,
            details=[result.model_dump(mode="json") for result in report.details],
            error_message=error_message,
        )
        db.commit()

    def _record_failed_run(self, source: str, message: str) -> int:
        with session_scope(self.session_factory) as db:
            run = IngestionRun(source=source, status=IngestionRunStatus.RUNNING.value)
            db.add(run)
            run.finish(IngestionRunStatus.FAILED, error_message=message)
            db.commit()
            return run.id

    # ------------------------------------------------------------------
    # Feeds
    # ------------------------------------------------------------------

    def fetch_and_ingest(self, source: str, limit: Optional[int] = None) -> IngestionReport:
        """
        Fetch a supplier's feed and ingest it.

        A feed that cannot be fetched produces a report carrying
        ``feed_error`` instead of raising.

        Raises:
            UnknownSupplierError: If no strategy handles the supplier
        """
        strategy = self.strategy_for(source)
        try:
            client = require_client(self.clients, source)
            payload = client.fetch_products()
        except (FeedFetchError, ConfigurationError) as e:
            logger.error(f"{strategy.label} feed failed: {e}")
            report = IngestionReport(source=source, feed_error=str(e))
            report.run_id = self._record_failed_run(source, str(e))
            return report

        records = strategy.extract_records(payload)
        logger.info(f"Fetched {len(records)} {strategy.label} records")
        return self.ingest(source, records, limit=limit)

    def ingest_file(
        self, source: str, path: Union[str, Path], limit: Optional[int] = None
    ) -> IngestionReport:
        """
        Ingest a feed dump stored as a JSON file.

        Raises:
            FeedFetchError: If the file cannot be read or is not valid JSON
        """
        strategy = self.strategy_for(source)
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            raise FeedFetchError(source, f"Cannot read feed file {path}: {e}") from e

        logger.info(f"Loaded {strategy.label} feed from {path}")
        return self.ingest(source, strategy.extract_records(payload), limit=limit)

    def sync(self, suppliers: Sequence[str], limit: Optional[int] = None) -> SyncSummary:
        """
        Fetch and ingest several suppliers in parallel.

        A supplier that fails as a whole (unknown tag, unreachable feed)
        gets a supplier-level error entry; the others are unaffected.

        Args:
            suppliers: Supplier tags
            limit: Per-supplier record limit

        Returns:
            SyncSummary with combined and per-supplier counts
        """
        sources = list(dict.fromkeys(suppliers))
        if not sources:
            return SyncSummary()

        reports: Dict[str, IngestionReport] = {}
        workers = min(self.settings.sync_max_workers, len(sources))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sync") as executor:
            future_to_source = {
                executor.submit(self.fetch_and_ingest, source, limit): source for source in sources
            }
            for future in as_completed(future_to_source):
                source = future_to_source[future]
                try:
                    reports[source] = future.result()
                except Exception as e:
                    logger.error(f"Sync of supplier '{source}' failed: {e}")
                    reports[source] = IngestionReport(source=source, feed_error=str(e))

        summary = SyncSummary.from_reports([reports[source] for source in sources])
        logger.info(
            f"Sync finished: {summary.imported_count} imported, {summary.error_count} errors "
            f"across {len(sources)} suppliers"
        )
        return summary

    def schedule_initial_import(
        self,
        suppliers: Optional[List[str]] = None,
        delay: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> Optional["Future[SyncSummary]"]:
        """
        Start a background sync when the catalog is empty.

        Args:
            suppliers: Supplier tags, defaults to every configured feed
            delay: Seconds to wait before syncing
            limit: Per-supplier record limit

        Returns:
            Future resolving to the SyncSummary, or None when products exist
        """
        with session_scope(self.session_factory) as db:
            existing = self.product_service.count(db)
        if existing:
            logger.info(f"Catalog has {existing} products, skipping initial import")
            return None

        sources = suppliers if suppliers is not None else sorted(self.clients)
        delay = self.settings.auto_import_delay_seconds if delay is None else delay
        logger.info(f"Catalog is empty, importing {', '.join(sources) or 'nothing'} in {delay}s")

        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="initial-import")
        future = executor.submit(self._delayed_sync, sources, delay, limit)
        executor.shutdown(wait=False)
        return future

    def _delayed_sync(self, sources: List[str], delay: float, limit: Optional[int]) -> SyncSummary:
        if delay > 0:
            time.sleep(delay)
        return self.sync(sources, limit=limit)
