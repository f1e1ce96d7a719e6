from __future__ import annotations

import argparse
import logging
import threading
from typing import Callable

from magview.config import settings
from magview.models.hrrr import cycle_label, forecast_hour_label, utc_hour_now, valid_forecast_hours
from magview.models.params import filter_param_groups, find_param
from magview.services.naming import MagNaming
from magview.services.playback import (
    FrameDisplay,
    PlaybackController,
    PlaybackState,
    SchedulerTicker,
    Ticker,
)
from magview.services.relay import MagRelay
from magview.services.upstream import RelayError

logger = logging.getLogger(__name__)


def _make_ticker() -> Ticker:
    return SchedulerTicker()


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("magview.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def _cmd_url(args: argparse.Namespace) -> int:
    naming = MagNaming.from_settings(settings)
    if args.size is not None:
        naming.size_suffix = args.size.lower()
    request = naming.request(args.cycle, args.fhr, args.param, model=args.model, area=args.area)
    urls = naming.frame_urls(request)
    item = find_param(request.param)
    if item is not None:
        print(f"label:    {item.label}")
    print(f"filename: {urls['filename']}")
    print(f"direct:   {urls['direct_url']}")
    print(f"proxy:    {urls['proxy_url']}")
    return 0


def _cmd_params(args: argparse.Namespace) -> int:
    groups = filter_param_groups(args.filter)
    if not groups:
        print(f"No parameters match {args.filter!r}")
        return 1
    for group in groups:
        print(group.group)
        for item in group.items:
            print(f"  {item.key:<18} {item.label}")
    return 0


def _cmd_hours(args: argparse.Namespace) -> int:
    hours = valid_forecast_hours(args.cycle)
    print(f"{cycle_label(args.cycle)}: {' '.join(str(h).rjust(3, '0') for h in hours)}")
    return 0


def play_frames(
    controller: PlaybackController,
    naming: MagNaming,
    frames: int,
    *,
    relay: MagRelay | None = None,
    out: Callable[[str], None] = print,
    timeout: float | None = None,
) -> list[str]:
    """Play until ``frames`` frames have been shown, reporting each proxied frame URL."""
    if frames <= 0:
        return []
    display = FrameDisplay()
    shown: list[str] = []
    done = threading.Event()

    def _on_state(state: PlaybackState) -> None:
        if done.is_set() or not state.is_playing:
            return
        request = naming.request(state.cycle_hour, state.forecast_hour, state.parameter)
        display.show(naming.proxy_url(request))
        if relay is not None:
            try:
                relay.fetch(request)
            except RelayError:
                display.mark_failed()
        marker = " (dimmed)" if display.dimmed else ""
        out(f"{cycle_label(state.cycle_hour)} {forecast_hour_label(state.forecast_hour)} {display.url}{marker}")
        shown.append(display.url or "")
        if len(shown) >= frames:
            done.set()

    unsubscribe = controller.subscribe(_on_state)
    try:
        controller.play()
        done.wait(timeout)
    finally:
        unsubscribe()
        controller.pause()
    return shown


def _cmd_play(args: argparse.Namespace) -> int:
    naming = MagNaming.from_settings(settings)
    initial = PlaybackState(
        cycle_hour=args.cycle if args.cycle is not None else utc_hour_now(),
        forecast_hour=args.start,
        parameter=args.param or settings.DEFAULT_PARAM,
        interval_ms=args.interval_ms,
    )
    ticker = _make_ticker()
    controller = PlaybackController(ticker, initial)
    relay = MagRelay(naming, settings) if args.check else None
    try:
        play_frames(controller, naming, args.frames, relay=relay)
    except KeyboardInterrupt:
        logger.info("Playback interrupted")
    finally:
        controller.close()
        if isinstance(ticker, SchedulerTicker):
            ticker.shutdown()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="magview", description="Browse HRRR imagery from NCEP MAG")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL)
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the proxy and catalog API")
    serve.add_argument("--host", default=settings.API_HOST)
    serve.add_argument("--port", type=int, default=settings.API_PORT)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=_cmd_serve)

    url = sub.add_parser("url", help="Print MAG filename, direct URL and proxy URL")
    url.add_argument("--cycle", type=int, required=True)
    url.add_argument("--fhr", type=int, required=True)
    url.add_argument("--param", default=None)
    url.add_argument("--model", default=None)
    url.add_argument("--area", default=None)
    url.add_argument("--size", default=None)
    url.set_defaults(func=_cmd_url)

    params = sub.add_parser("params", help="List the parameter catalog")
    params.add_argument("--filter", default=None)
    params.set_defaults(func=_cmd_params)

    hours = sub.add_parser("hours", help="List valid forecast hours for a cycle")
    hours.add_argument("--cycle", type=int, required=True)
    hours.set_defaults(func=_cmd_hours)

    play = sub.add_parser("play", help="Step through forecast hours on a timer")
    play.add_argument("--cycle", type=int, default=None)
    play.add_argument("--param", default=None)
    play.add_argument("--start", type=int, default=0)
    play.add_argument("--interval-ms", type=int, default=settings.PLAYBACK_INTERVAL_MS)
    play.add_argument("--frames", type=int, default=19)
    play.add_argument("--check", action="store_true", help="Fetch each frame through the relay")
    play.set_defaults(func=_cmd_play)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
