# main.py
import argparse
import asyncio
import sys

from route_sim.app.build import App, build
from route_sim.config.models import ScenarioModel, load_scenario
from route_sim.domain.entities.geography import Waypoint
from route_sim.domain.entities.speed import Speed
from route_sim.domain.traversal.engine import Outcome, Phase
from route_sim.io.route_file import load_route
from route_sim.sim.realtime import AsyncioScheduler


def _latlon(s: str) -> Waypoint:
    try:
        lat, lon = (float(v) for v in s.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected LAT,LON, got {s!r}") from None
    try:
        return Waypoint(lat, lon)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Walk a simulated location along a route.")
    act = p.add_mutually_exclusive_group(required=True)
    act.add_argument("--route", help="route file (JSON point list or GeoJSON LineString)")
    act.add_argument("--to", type=_latlon, metavar="LAT,LON", help="destination to route to")
    act.add_argument("--to-favorite", metavar="NAME", help="saved place to route to")
    act.add_argument("--teleport", type=_latlon, metavar="LAT,LON",
                     help="set the simulated location and exit")
    act.add_argument("--nudge", type=float, metavar="HEADING",
                     help="step the last known location along HEADING degrees and exit")
    act.add_argument("--save-favorite", metavar="NAME",
                     help="save the last known location as a favorite and exit")
    p.add_argument("--from", dest="source", type=_latlon, metavar="LAT,LON",
                   help="route origin (default: last known location)")
    p.add_argument("--distance", type=float, metavar="METERS",
                   help="step length for --nudge (default: one second at the current speed)")
    p.add_argument("--config", help="scenario config (JSON)")
    p.add_argument("--speed", type=Speed.parse,
                   help="walk | run | cycle | drive | race (saved when speed_path is set)")
    p.add_argument("--realtime", action="store_true", help="pace ticks in wall time")
    p.add_argument("--jsonl", action="store_true", help="print progress records as JSON lines")
    return p


def _start(app: App, args, on_complete=None) -> Outcome:
    if args.route:
        return app.start(load_route(args.route), on_complete=on_complete)
    if args.to_favorite:
        return app.navigate_to_favorite(args.to_favorite, source=args.source, on_complete=on_complete)
    return app.navigate(args.to, source=args.source, on_complete=on_complete)


async def _run_realtime(app: App, args) -> Outcome:
    done = asyncio.Event()
    outcome = _start(app, args, on_complete=done.set)
    if outcome is Outcome.OK:
        await done.wait()
    return outcome


def _place(app: App, args) -> int:
    """One-shot location edits: no traversal, just records and stores."""
    if args.teleport:
        pos = app.teleport(args.teleport)
    elif args.nudge is not None:
        pos = app.nudge(args.nudge, args.distance)
        if pos is None:
            print("no known location to move from", file=sys.stderr)
            return 2
    else:
        if app.favorites is None:
            print("no favorites file configured (output.favorites_path)", file=sys.stderr)
            return 2
        fav = app.save_favorite(args.save_favorite)
        if fav is None:
            print("no known location to save", file=sys.stderr)
            return 2
        pos = fav.position
    print(f"location {pos.lat:.6f},{pos.lon:.6f}", file=sys.stderr)
    return 0


def run(args, *, model: ScenarioModel | None = None) -> int:
    model = model or (load_scenario(args.config) if args.config else ScenarioModel())
    if args.jsonl:
        model = model.model_copy(update={"output": model.output.model_copy(update={"jsonl": True})})
    placing = bool(args.teleport or args.nudge is not None or args.save_favorite)
    realtime = args.realtime and not placing
    app = build(model, scheduler=AsyncioScheduler()) if realtime else build(model)
    if args.speed is not None:
        app.set_speed(args.speed)

    if placing:
        return _place(app, args)

    if realtime:
        outcome = asyncio.run(_run_realtime(app, args))
    else:
        outcome = _start(app, args)
        if outcome is Outcome.OK:
            app.scheduler.run()

    if outcome is not Outcome.OK:
        print(f"traversal not started: {outcome.value}", file=sys.stderr)
        return 2
    if app.engine.phase is not Phase.COMPLETED:
        return 1
    snap = app.engine.snapshot()
    end = snap.position
    print(f"arrived at {end.lat:.6f},{end.lon:.6f} after {snap.ticks} ticks", file=sys.stderr)
    return 0


def main(argv=None) -> int:
    return run(_parser().parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
