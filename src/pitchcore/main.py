from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Any, Dict, Optional

from .config import AnalysisConfig, Profile, resolve_config
from .engine import EngineState, PitchEngine
from .errors import PitchCoreError
from .pitch import PitchEstimate
from .scheduling import AsyncioScheduler
from .sources import FrameSource, SoundDeviceSource, ToneSource
from .tuning import tune

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Real-time single voice pitch detection")
    parser.add_argument(
        "--profile",
        choices=[p.value for p in Profile],
        default=Profile.GENERAL.value,
        help="Analysis profile",
    )
    parser.add_argument("--device", help="Audio input device (index or name)")
    parser.add_argument("--samplerate", type=int, help="Sample rate override")
    parser.add_argument("--framesize", type=int, help="Frame size override, in samples")
    parser.add_argument("--min-freq", type=float, help="Lowest accepted frequency (Hz)")
    parser.add_argument("--max-freq", type=float, help="Highest accepted frequency (Hz)")
    parser.add_argument("--threshold", type=float, help="Confidence threshold (0-1)")
    parser.add_argument("--tone", type=float, help="Analyse a synthetic sine at this frequency instead of the microphone")
    parser.add_argument("--duration", type=float, help="Stop after this many seconds")
    parser.add_argument("--tuner", action="store_true", help="Show the nearest guitar string")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AnalysisConfig:
    overrides: Dict[str, Any] = {}
    if args.samplerate is not None:
        overrides["sampleRate"] = args.samplerate
    if args.framesize is not None:
        overrides["frameSize"] = args.framesize
    if args.min_freq is not None:
        overrides["frequencyRange.min"] = args.min_freq
    if args.max_freq is not None:
        overrides["frequencyRange.max"] = args.max_freq
    if args.threshold is not None:
        overrides["confidenceThreshold"] = args.threshold
    return resolve_config(args.profile, overrides)


def build_source(args: argparse.Namespace, config: AnalysisConfig) -> FrameSource:
    if args.tone is not None:
        return ToneSource(args.tone, sample_rate=config.sample_rate)
    device = _parse_device(args.device)
    return SoundDeviceSource(sample_rate=config.sample_rate, device=device)


def format_estimate(estimate: PitchEstimate, tuner: bool = False) -> str:
    line = (
        f"{estimate.name:<4} {estimate.cents:+4d} cents  "
        f"{estimate.frequency:8.2f} Hz  conf {estimate.confidence:4.2f}  amp {estimate.amplitude:.4f}"
    )
    if tuner:
        reading = tune(estimate.frequency)
        line += f"  | string {reading.string.number} ({reading.string.name}) {reading.cents:+6.1f} {reading.status}"
    return line


async def run(engine: PitchEngine, duration: Optional[float]) -> None:
    finished = asyncio.Event()

    def on_state(state: EngineState) -> None:
        if state is EngineState.IDLE:
            finished.set()

    engine.add_listener(on_state)
    engine.start()
    try:
        if duration is None:
            await finished.wait()
        else:
            try:
                await asyncio.wait_for(finished.wait(), timeout=duration)
            except asyncio.TimeoutError:
                pass
    finally:
        engine.stop()
        engine.remove_listener(on_state)
    # A read failure inside a loop callback never reaches this coroutine on its own.
    if engine.last_error is not None:
        raise engine.last_error


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except PitchCoreError as exc:
        logger.error("%s", exc)
        return 2

    source = build_source(args, config)
    # Pace synthetic input at real time; the microphone paces itself.
    interval = config.frame_size / config.sample_rate if args.tone is not None else 0.0

    engine = PitchEngine(
        source,
        config,
        scheduler=AsyncioScheduler(),
        interval=interval,
        on_estimate=lambda estimate: print(format_estimate(estimate, tuner=args.tuner), flush=True),
    )

    try:
        asyncio.run(run(engine, args.duration))
    except KeyboardInterrupt:
        pass
    except PitchCoreError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def _parse_device(raw: Optional[str]) -> Optional[int | str]:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return raw


if __name__ == "__main__":
    raise SystemExit(main())
