import cProfile
import io
import logging
import pstats
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class Profiler:
    """
    cProfile wrapper used by the population simulator.

    When disabled every method is a no-op and nothing is written to disk.
    Wall-clock durations of named sections are kept in `timings`.
    """

    def __init__(self, enabled: bool = False, output_dir: str = "profiling_results"):
        self.enabled = enabled
        self.output_dir = Path(output_dir)
        self.profiler = cProfile.Profile() if enabled else None
        self.timings: Dict[str, float] = {}
        self._start_time: Optional[float] = None

    def start(self):
        if self.enabled:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self._start_time = time.perf_counter()
            self.profiler.enable()
        return self

    def stop(self, name: str = "profile") -> Optional[pstats.Stats]:
        """Stop profiling and write <name>.prof plus a text report of the top 30 functions."""
        if not self.enabled:
            return None

        self.profiler.disable()
        duration = time.perf_counter() - self._start_time
        self.timings[name] = duration

        self.profiler.dump_stats(str(self.output_dir / f"{name}.prof"))

        s = io.StringIO()
        ps = pstats.Stats(self.profiler, stream=s).sort_stats("cumulative")
        ps.print_stats(30)
        with open(self.output_dir / f"{name}_report.txt", "w") as f:
            f.write(f"Total execution time: {duration:.4f} seconds\n\n")
            f.write(s.getvalue())

        logger.info("Profile '%s' took %.4f s", name, duration)
        return ps

    @contextmanager
    def profile_section(self, name: str):
        """Profile the enclosed block into its own output files."""
        section = Profiler(enabled=self.enabled, output_dir=str(self.output_dir))
        section.start()
        try:
            yield
        finally:
            section.stop(name=name)
            self.timings.update(section.timings)
