# main.py
from __future__ import annotations

import argparse
from typing import Sequence

from debug import COMPONENTS, Debug
from engine import Engine, EngineConfig
from errors import EngineError
from wheels import legacy_spec

# ────────────────────────────────────────────────────────────────────────
#  0. Logging
# ────────────────────────────────────────────────────────────────────────

debug = Debug()


def setup_logging(components: Sequence[str], log_file: str | None) -> None:
    if not components and not log_file:
        return
    Debug.configure(log_to=log_file)
    debug.enable(*components)


# ────────────────────────────────────────────────────────────────────────
#  1. CLI helpers
# ────────────────────────────────────────────────────────────────────────


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Encrypt or decrypt with a configurable rotor machine")
    p.add_argument("--machine", metavar="FILE", help="Machine description (.json or .xml). Default: bundled Legacy wheels.")
    p.add_argument("--load", metavar="PATH", help="Restore a saved session (the .enigma.json suffix is optional).")

    code = p.add_mutually_exclusive_group()
    code.add_argument("--code", metavar="CODE", help='Manual code, e.g. "<3,2,1><ODX><I>" or "<3,2,1><ODX><I><ABCD>".')
    code.add_argument("--random", action="store_true", help="Pick a random code.")
    p.add_argument("--seed", type=int, help="Deterministic seed for --random (omit for a secure random pick)")

    p.add_argument("-m", "--message", metavar="TEXT", help="Text to process with the configured machine.")
    p.add_argument("--trace", action="store_true", help="Print the signal path of every symbol.")
    p.add_argument("--history", action="store_true", help="Print the message history at the end.")
    p.add_argument("--details", action="store_true", help="Print the machine description and state.")
    p.add_argument("--save", metavar="PATH", help="Save the session after processing.")
    p.add_argument("--fold-case", dest="fold_case", action="store_true", help="Upper-case input the alphabet only knows in upper case.")
    p.add_argument("--debug", nargs="+", metavar="COMPONENT", choices=COMPONENTS, default=[], help=f"Enable debug logging for: {', '.join(COMPONENTS)}")
    p.add_argument("--log-file", dest="log_file", metavar="FILE", help="Also write log records to FILE.")
    return p.parse_args(argv)


def run(args: argparse.Namespace) -> None:
    engine = Engine(EngineConfig(fold_case=args.fold_case, seed=args.seed))

    # where does the machine come from? ---------------------------------
    if args.load:
        engine.load_snapshot(args.load)
        print(f"✅  Restored session from {args.load}")
    elif args.machine:
        spec = engine.load_machine(args.machine)
        print(f"✅  Loaded machine '{spec.name}' ({len(spec.rotors)} rotors, {len(spec.reflectors)} reflectors)")
    else:
        engine.load_spec(legacy_spec())

    # code ---------------------------------------------------------------
    if args.code:
        print("Code:", engine.config_manual(args.code))
    elif args.random:
        print("Code:", engine.config_random())

    if args.details:
        print(engine.machine_details())

    # one-shot message ---------------------------------------------------
    if args.message is not None:
        result = engine.process(args.message)
        if args.trace:
            print(result)
        print("Output:", result.output)
        print("Window:", engine.current_config)

    if args.history:
        print(engine.history())

    if args.save:
        target = engine.save_snapshot(args.save)
        print(f"✅  Wrote {target}")


# ────────────────────────────────────────────────────────────────────────
#  2. Main entry point
# ────────────────────────────────────────────────────────────────────────


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.debug, args.log_file)
    try:
        run(args)
    except EngineError as exc:
        raise SystemExit(f"❌  {exc.kind.value} error: {exc.message}") from None


if __name__ == "__main__":
    main()
