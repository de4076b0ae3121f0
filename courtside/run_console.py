"""
Terminal scoring console: the umpire types one command per line and the live score
is printed after each one.

    a [kind]   point to player 1 (kind: normal, ace, double-fault, winner, unforced-error)
    b [kind]   point to player 2
    undo       revert the last point
    score      print the current score
    end        finalize the match and print the result
    quit       leave without a result
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Iterable, TextIO

# Run from project root: python -m courtside.run_console
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from courtside import config
from courtside.directory import PlayerDirectory
from courtside.persistence import MatchRepository, SqliteEventSink, get_connection, init_db, set_db_path
from courtside.scoring.emitter import InMemorySink
from courtside.scoring.errors import InvariantViolation
from courtside.scoring.formatter import format_score_line
from courtside.scoring.schemas import MatchResult, Slot
from courtside.session import MatchSession, start_match


def _print_live_score(session: MatchSession, names: dict[Slot, str], out: TextIO) -> None:
    server = names[session.state.serving]
    out.write(f"  {names[Slot.A]} vs {names[Slot.B]}   {format_score_line(session.state)}   (serving: {server})\n")


def _print_final(result: MatchResult, names: dict[Slot, str], out: TextIO) -> None:
    winner = names[result.winner]
    loser = names[result.winner.opponent]
    out.write("\n" + "=" * 60 + "\n")
    out.write(f"  MATCH RESULT: {winner} def. {loser}  {result.score}\n")
    out.write("=" * 60 + "\n")


def run_console(
    session: MatchSession,
    lines: Iterable[str],
    out: TextIO = sys.stdout,
    names: dict[Slot, str] | None = None,
) -> MatchResult | None:
    """Apply commands until 'end', 'quit' or end of input. Returns the result if finalized."""
    names = names or {slot: session.player_id(slot) for slot in Slot}
    for raw in lines:
        parts = raw.strip().split()
        if not parts:
            continue
        cmd, args = parts[0].lower(), parts[1:]
        try:
            if cmd in ("a", "b"):
                result = session.award_point(cmd, args[0] if args else None)
                for w in result.warnings:
                    out.write(f"  warning: {w}\n")
                _print_live_score(session, names, out)
            elif cmd == "undo":
                if session.undo() is None:
                    out.write("  nothing to undo\n")
                else:
                    _print_live_score(session, names, out)
            elif cmd == "score":
                _print_live_score(session, names, out)
            elif cmd == "end":
                final = session.finalize()
                _print_final(final, names, out)
                return final
            elif cmd == "quit":
                session.close()
                return None
            else:
                out.write(f"  unknown command: {cmd}\n")
        except InvariantViolation as e:
            out.write(f"  rejected: {e}\n")
    return None


def run(
    player1_id: str,
    player2_id: str,
    db_path: Path | None = None,
    roster_path: Path | None = None,
    memory: bool = False,
) -> MatchResult | None:
    if memory:
        session = start_match(player1_id, player2_id, InMemorySink())
        names = {Slot.A: player1_id, Slot.B: player2_id}
    else:
        if db_path:
            set_db_path(db_path)
        init_db(roster_path=roster_path or config.ROSTER_PATH)
        conn = get_connection()
        try:
            repo = MatchRepository()
            stored = repo.create(conn, player1_id, player2_id)
            repo.mark_in_progress(conn, stored.id)
        finally:
            conn.close()
        directory = PlayerDirectory()
        names = {}
        for slot, pid in ((Slot.A, player1_id), (Slot.B, player2_id)):
            profile = directory.get_player(pid)
            names[slot] = f"{profile.display_name} ({profile.rating})" if profile else pid
        session = start_match(player1_id, player2_id, SqliteEventSink(), match_id=stored.id)
    print(f"\n  {names[Slot.A]}  vs  {names[Slot.B]}   [match {session.match_id}]")
    print("  " + "-" * 56)
    return run_console(session, sys.stdin, names=names)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Score a live match point by point from the terminal.")
    parser.add_argument("player1", help="Player id in slot a (serves first)")
    parser.add_argument("player2", help="Player id in slot b")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path")
    parser.add_argument("--roster", type=Path, default=None, help="Roster JSON to load into the directory")
    parser.add_argument("--memory", action="store_true", help="Keep events in memory instead of SQLite")
    parser.add_argument("--log-level", default=None, help="Logging level (default from COURTSIDE_LOG_LEVEL)")
    args = parser.parse_args(argv)
    config.configure_logging(args.log_level)
    try:
        run(args.player1, args.player2, db_path=args.db, roster_path=args.roster, memory=args.memory)
    except InvariantViolation as e:
        raise SystemExit(str(e))


if __name__ == "__main__":
    main()
