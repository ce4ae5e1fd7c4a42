"""Exercise nested, recursive and concurrent timing and print the report."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import hydra
from hydra.utils import to_absolute_path
from omegaconf import DictConfig, OmegaConf

from regiontimer import ReportConfig, TickClock, TimerSet
from regiontimer.utils.logging import logger, setup_logging


def recurse(timers: TimerSet, depth: int) -> int:
    if depth == 0:
        return 0
    return 1 + timers.time("recurse", recurse, timers, depth - 1)


@hydra.main(config_path="../configs", config_name="profile_demo", version_base=None)
def main(cfg: DictConfig) -> None:
    setup_logging(Path(to_absolute_path(cfg.log_file)) if cfg.log_file else None, level=cfg.log_level)

    clock = TickClock() if cfg.clock == "ticks" else None
    timers = TimerSet(clock=clock)
    pause = cfg.sleep_ms / 1000.0

    def inner() -> None:
        for _ in range(cfg.iterations):
            timers.time("world", time.sleep, pause)

    timers.time("hello", inner)
    timers.time("recursion", recurse, timers, cfg.recursion_depth)

    with ThreadPoolExecutor(max_workers=cfg.workers) as pool:
        futures = [pool.submit(timers.time, "worker", time.sleep, pause) for _ in range(cfg.workers)]
        for future in futures:
            future.result()

    report_cfg = ReportConfig(**OmegaConf.to_container(cfg.report, resolve=True))  # type: ignore[arg-type]
    timers.print(config=report_cfg)
    logger.info("Recorded {n} timer paths", n=len(timers))


if __name__ == "__main__":
    main()
