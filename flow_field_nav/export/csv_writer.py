"""CSV export of agent trajectories."""

import csv
from pathlib import Path
from typing import IO, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model.state import SimulationState

FIELDNAMES = ['step', 'elapsed_ms', 'goal_x', 'goal_y', 'agent_id',
              'x', 'y', 'distance', 'state']


class CSVWriter:
    """
    Streams one row per agent per tick to a CSV file.

    The goal columns repeat on every row so a run with goal changes can be
    split into legs without the console output.

        step,elapsed_ms,goal_x,goal_y,agent_id,x,y,distance,state
        1,16.0,1,1,1,1.5,9.484,14,moving
    """

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)
        self.file: Optional[IO[str]] = None
        self.writer: Optional[csv.DictWriter] = None
        self.rows_written = 0

    @property
    def is_open(self) -> bool:
        return self.file is not None

    def open(self) -> None:
        """Create the parent directory, truncate the file and write the header."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=FIELDNAMES)
        self.writer.writeheader()
        self.rows_written = 0

    def append(self, state: "SimulationState") -> None:
        if not self.is_open:
            self.open()
        rows = state.to_csv_rows()
        self.writer.writerows(rows)
        self.rows_written += len(rows)
        self.file.flush()

    def close(self) -> None:
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
