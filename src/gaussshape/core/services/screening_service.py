"""Service for screening a molecule database against query molecules."""

from typing import Iterable, Iterator, List, Optional, TextIO
import logging
from tqdm import tqdm

from .alignment_service import AlignmentService
from ..domain.models.alignment_result import ScreeningRecord
from ..domain.models.molecule import Molecule
from ..exceptions import InvalidArgumentError
from ..utils.benchmarking import TimingStats

COMMENT = "#"


class ScreeningService:
    """Scores database molecules by maximum Gaussian overlap with each query.

    Database molecules are processed one at a time, in order.
    """

    def __init__(self, alignment_service: Optional[AlignmentService] = None):
        """Initialize service with an alignment service dependency."""
        self._alignment = alignment_service or AlignmentService()
        self.logger = logging.getLogger(__name__)

    def screen(
        self,
        query: Molecule,
        database: Iterable[Molecule],
        start: int = 0,
        end: Optional[int] = None,
        stats: Optional[TimingStats] = None,
        progress: bool = False,
    ) -> Iterator[ScreeningRecord]:
        """
        Score database molecules against one query.

        Args:
            query: Query molecule
            database: Database molecules in file order
            start: Index of the first database molecule to score
            end: Index of the last database molecule to score (inclusive)
            stats: Collects the time spent per database molecule
            progress: Show a progress bar

        Yields:
            ScreeningRecord for each database molecule in range
        """
        if start < 0 or (end is not None and end < start):
            raise InvalidArgumentError(f"Invalid database range: {start}..{end}")

        if stats is None:
            stats = TimingStats(name=query.name)
        query_volume = self._alignment.evaluate_volume(query)
        self.logger.info(f"Screening query {query.name or '<unnamed>'}")

        for index, molecule in enumerate(tqdm(database, disable=not progress)):
            if index < start:
                continue
            if end is not None and index > end:
                break
            if molecule.atom_count == 0:
                self.logger.warning(f"Skipping empty database molecule {index}")
                continue
            with stats.measure(molecule.name) as timer:
                result = self._alignment.evaluate_max_overlap(
                    query, molecule, reference_volume=query_volume
                )
            elapsed = timer.elapsed()
            yield ScreeningRecord(
                query_name=query.name,
                molecule_name=molecule.name,
                query_volume=query_volume,
                molecule_volume=result.fit_volume,
                overlap_volume=result.overlap_volume,
                elapsed=elapsed,
            )

    def screen_all(
        self,
        queries: Iterable[Molecule],
        database: List[Molecule],
        stream: TextIO,
        start: int = 0,
        end: Optional[int] = None,
        progress: bool = False,
    ) -> List[ScreeningRecord]:
        """Screen every query and write a report section per query."""
        records: List[ScreeningRecord] = []
        for query in queries:
            stats = TimingStats(name=query.name)
            query_records = list(
                self.screen(query, database, start=start, end=end, stats=stats, progress=progress)
            )
            write_report(query, query_records, stats, stream)
            self.logger.info(str(stats))
            records.extend(query_records)
        return records


def write_report(
    query: Molecule,
    records: List[ScreeningRecord],
    stats: TimingStats,
    stream: TextIO,
) -> None:
    """
    Write one query's screening results.

    Each database molecule gives a line ``name; query volume; molecule volume;
    overlap; similarity``, framed by ``#`` comment lines for the query and the
    timing statistics.
    """
    stream.write(f"{COMMENT} QUERY {query.name}\n")
    stream.write(
        f"{COMMENT} NAME; QUERY_VOLUME; MOLECULE_VOLUME; OVERLAP_VOLUME; SIMILARITY\n"
    )
    for record in records:
        stream.write(
            f"{record.molecule_name}; {record.query_volume:.4f}; "
            f"{record.molecule_volume:.4f}; {record.overlap_volume:.4f}; "
            f"{record.similarity:.4f}\n"
        )
    stream.write(f"{COMMENT} TOTAL_MOLECULES {stats.count}\n")
    stream.write(f"{COMMENT} TOTAL_TIME {stats.total_time:.4f}\n")
    stream.write(f"{COMMENT} TIME_PER_CONFORMER {stats.avg_time:.4f}\n")
