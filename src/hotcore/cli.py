from __future__ import annotations

import argparse
from pathlib import Path

from hotcore.core import DEFAULT_PROFILE_ID, default_game_profiles, seeded_random
from hotcore.simulation import AutoplaySimulator, GameRuntime, ReplayHarness


def _print_summary(runtime: GameRuntime) -> None:
    state = runtime.game.state
    report = runtime.game.stability()
    print(f"Tick {runtime.clock.current_tick()}: generation {state.active_generation_id} held by {state.current_holder}")
    print(f"Phase {runtime.game.phase().value}, stability {report.stability_percent:.0f}% ({report.level.value})")
    for alert in report.alerts:
        print(f"! {alert}")
    dead = list(runtime.game.deaths)
    if dead:
        print("Hall of shame:")
        for record in dead:
            print(f"- generation {record.generation_id}: {record.last_holder} ({record.cause.value} at tick {record.retired_tick})")


def main() -> None:
    parser = argparse.ArgumentParser(description="Hot Core: pass the core before it melts")
    parser.add_argument("--root", type=Path, default=Path.cwd(), help="runtime root directory")
    parser.add_argument("--profile", default=DEFAULT_PROFILE_ID, choices=sorted(default_game_profiles()), help="game timing profile")
    parser.add_argument("--seed", type=int, default=None, help="seed for deterministic autoplay runs")
    parser.add_argument("--players", type=int, default=5, help="number of autoplay bots")
    parser.add_argument("--rounds", type=int, default=50, help="autoplay rounds to simulate")
    parser.add_argument("--replay", type=Path, default=None, help="replay a recorded action file instead of autoplay")
    parser.add_argument("--export", action="store_true", help="export analytics marts after the run")
    args = parser.parse_args()

    if args.replay is not None:
        runtime = ReplayHarness.load(args.replay).run(args.root)
    else:
        runtime = GameRuntime(root=args.root, profile_id=args.profile)
        players = [f"0x{i:040x}" for i in range(1, max(args.players, 3) + 1)]
        simulator = AutoplaySimulator(runtime, players, seeded_random(args.seed))
        summary = simulator.run(args.rounds)
        print(f"Simulated {summary.rounds} rounds: {summary.passes} passes, {summary.grabs} grabs, {summary.respawns} respawns")
        if summary.rejected:
            print("Rejected: " + ", ".join(f"{code}={n}" for code, n in sorted(summary.rejected.items())))

    if runtime.halted:
        print(f"Runtime halted; forensic artifact at {runtime.last_forensic_path}")
    _print_summary(runtime)

    print("Leaderboard:")
    for entry in runtime.refresh_analytics().leaderboard(current_holder=runtime.game.state.current_holder):
        marker = " *" if entry.is_active else ""
        print(f"{entry.rank:>2}. {entry.participant}: {entry.points} pts, {entry.holds} holds{marker}")

    if args.export:
        print("Exported datasets:")
        for p in runtime.export():
            print(f"- {p}")


if __name__ == "__main__":
    main()
