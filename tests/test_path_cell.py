from __future__ import annotations

import threading
from pathlib import Path

from webnote.path_cell import FilePathCell


def test_cell_starts_unset_and_sets_once(tmp_path: Path) -> None:
    cell = FilePathCell()
    assert cell.get() is None
    assert not cell.is_set

    first = tmp_path / "a.txt"
    assert cell.try_init(first) is True
    assert cell.try_init(tmp_path / "b.txt") is False
    assert cell.get() == first
    assert cell.is_set


def test_cell_initialized_at_startup_never_changes(tmp_path: Path) -> None:
    startup = tmp_path / "startup.txt"
    cell = FilePathCell(startup)
    assert cell.try_init(tmp_path / "other.txt") is False
    assert cell.get() == startup


def test_concurrent_try_init_has_single_winner(tmp_path: Path) -> None:
    cell = FilePathCell()
    workers = 16
    barrier = threading.Barrier(workers)
    results: dict[int, bool] = {}

    def _race(index: int) -> None:
        barrier.wait(timeout=5)
        results[index] = cell.try_init(tmp_path / f"{index}.txt")

    threads = [threading.Thread(target=_race, args=(i,)) for i in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    winners = [index for index, won in results.items() if won]
    assert len(results) == workers
    assert len(winners) == 1
    assert cell.get() == tmp_path / f"{winners[0]}.txt"
