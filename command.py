# `Command`s bundle names/aliases, help-strings, and functionality.
# Also defines all the individual commands in keysmith.

import enum
from typing import Callable, Optional

import analysis
import annealing
from corpus import Corpus, get_corpus
import graphs
import layout
import penalty
from penalty import calculate_penalty, format_penalty
import session
from session import Session

class CommandType(enum.Enum):
    GENERAL = enum.auto()
    ANALYSIS = enum.auto()
    EDITING = enum.auto()

class Command:

    def __init__(self, type: CommandType, help: tuple[str, ...],
                 names: tuple[str, ...],
                 fn: Callable[[list[str], Session], Optional[int]]):
        """
        `names` is a list of aliases that the user can use to activate the
        command. The first of these will be use to alphabetize commands.

        The first string of `help` will be used as a brief summary when the
        `help` command is used with no args. The rest will be joined with
        newlines.

        `fn` is the actual function to be run, with parameters being
        `args: list[str]` and `session`. It returns the process exit status,
        or None for success.
        """
        self.names = names
        self.type = type
        self.help = help
        self.fn = fn

commands = list()
by_name = dict()

def register_command(cmd: Command):
    commands.append(cmd)
    for name in cmd.names:
        by_name[name] = cmd

# option -> setting name
options = {
    "-t": "top", "--top": "top",
    "-s": "swaps", "--swaps": "swaps", "--swaps-per-iteration": "swaps",
    "-g": "generations", "--generations": "generations",
    "-j": "processes", "--processes": "processes",
    "--seed": "seed",
    "--plot": "plot",
}
flags = {
    "-d": "debug", "--debug": "debug",
}

def extract_options(args: list[str], s: Session) -> list[str]:
    """Applies any options in args to the session settings and returns
    the remaining positional args.
    """
    positional = []
    tokens = iter(args)
    for token in tokens:
        if token in flags:
            s.settings[flags[token]] = True
        elif token in options:
            try:
                s.set_option(options[token], next(tokens))
            except StopIteration:
                s.say(f"Missing value for option {token}", session.red)
        else:
            positional.append(token)
    return positional

def run_command(name: str, args: list[str], s: Session) -> int:
    cmd = by_name.get(name, None)
    if cmd is None:
        s.say(f"Unrecognized command {name}", session.red)
        cmd_help([], s)
        return 2
    args = extract_options(args, s)
    if s.settings["debug"]:
        session.set_debug(True)
    return cmd.fn(args, s) or 0

# Actual commands

def cmd_run(args: list[str], s: Session):
    corpus_, target_layout = load_inputs(args, s)
    if corpus_ is None:
        return 1
    penalties = penalty.init()
    rng = s.make_rng()
    top = s.settings["top"]
    max_swaps = s.settings["swaps"]
    generations = s.settings["generations"]
    high_keys = s.settings["high_keys"]
    plot_path = s.settings["plot"]

    s.say(f"Annealing {target_layout.name} against {corpus_}... >>>",
        session.green)
    initial = calculate_penalty(corpus_, target_layout, penalties, True)
    s.say("Initial layout:\n" + format_penalty(
        target_layout, initial, high_keys))

    iterations, temperatures, scores = [], [], []
    def record_step(step: analysis.AnnealStep):
        iterations.append(len(iterations) + 1)
        temperatures.append(step.temperature)
        scores.append(step.score)

    generation = 0
    try:
        while not generations or generation < generations:
            generation += 1
            best = analysis.simulate(corpus_, target_layout, penalties, top,
                max_swaps, rng, record_step if plot_path else None)
            s.say(f"\nGeneration {generation}: "
                f"{len(best)} best layout(s)", session.green)
            for entry in best:
                detailed = calculate_penalty(
                    corpus_, entry.layout, penalties, True)
                s.say("\n" + format_penalty(entry.layout, detailed, high_keys))
    except KeyboardInterrupt:
        s.say(f"Interrupted during generation {generation}", session.blue)

    if plot_path and iterations:
        graphs.plot_anneal(iterations, temperatures, scores, plot_path,
            f"{target_layout.name}, {corpus_.name}")
        s.say(f"Saved annealing chart as {plot_path}", session.green)

register_command(Command(
    CommandType.EDITING,
    (
        "run <corpus> [layout] [-t top] [-s swaps] [-g generations] "
            "[--seed n] [--plot file] [-d]: Optimize with simulated annealing",
        "Starts from the initial layout if none is given.\n"
            f"Each generation runs {annealing.N} iterations, each making "
            "1 to swaps random swaps to the last accepted layout. Worse "
            "layouts are accepted less often as the temperature drops. "
            "Prints the top layouts after every generation; with "
            "generations 0, keeps going until interrupted.\n"
            "--plot saves a chart of the accepted scores and temperature."
    ),
    ("run", "anneal"),
    cmd_run
))

def cmd_run_ref(args: list[str], s: Session):
    corpus_ = load_corpus(args, s)
    if corpus_ is None:
        return 1
    penalties = penalty.init()
    for lay in layout.REFERENCE_LAYOUTS:
        result = calculate_penalty(corpus_, lay, penalties, True)
        s.say(f"Reference: {lay.name}\n"
            + format_penalty(lay, result, s.settings["high_keys"]) + "\n")

register_command(Command(
    CommandType.ANALYSIS,
    (
        "run-ref <corpus>: Score all built-in layouts",
        "Prints the detailed penalty of "
            + ", ".join(lay.name for lay in layout.REFERENCE_LAYOUTS) + "."
    ),
    ("run-ref", "ref"),
    cmd_run_ref
))

def cmd_refine(args: list[str], s: Session):
    corpus_, target_layout = load_inputs(args, s)
    if corpus_ is None:
        return 1
    penalties = penalty.init()
    depth = s.settings["swaps"]
    high_keys = s.settings["high_keys"]

    s.say(f"Refining {target_layout.name} within {depth} swap(s), "
        f"{layout.count_permutations(depth)} layouts per step... >>>",
        session.green)
    initial = calculate_penalty(corpus_, target_layout, penalties, True)
    s.say("Initial layout:\n" + format_penalty(
        target_layout, initial, high_keys))

    num_steps = 0
    optimized = target_layout
    for optimized, result, _ in analysis.refine(
        corpus_, target_layout, penalties, depth,
        processes=s.settings["processes"]
    ):
        num_steps += 1
        s.say(f"Edit #{num_steps}: scaled = {result.scaled}\n"
            + optimized.layer_str())
    s.say("Local optimum reached", session.green)

    result = calculate_penalty(corpus_, optimized, penalties, True)
    s.say("Best layout:\n" + format_penalty(optimized, result, high_keys))

register_command(Command(
    CommandType.EDITING,
    (
        "refine <corpus> [layout] [-s swaps] [-j processes] [-d]: "
            "Optimize by exhaustive search of nearby layouts",
        "Starts from the initial layout if none is given.\n"
            "Scores every layout within swaps swaps (use 1 or 2, the count "
            "grows very fast) and moves to the best, repeating until no "
            "layout nearby is better. -j spreads the scoring over several "
            "processes."
    ),
    ("refine", "improve"),
    cmd_refine
))

def cmd_score(args: list[str], s: Session):
    corpus_, target_layout = load_inputs(args, s)
    if corpus_ is None:
        return 1
    result = calculate_penalty(corpus_, target_layout, penalty.init(), True)
    s.say(f"{target_layout.name}\n"
        + format_penalty(target_layout, result, s.settings["high_keys"]))

register_command(Command(
    CommandType.ANALYSIS,
    (
        "score <corpus> [layout]: Show the penalty breakdown of a layout",
        "Uses the initial layout if none is given."
    ),
    ("score", "analyze"),
    cmd_score
))

def cmd_help(args: list[str], s: Session):
    if args:
        cmd = by_name.get(args[0], None)
        if cmd is None:
            s.say(f"Unrecognized command {args[0]}", session.red)
            return 2
        s.say("\n".join(cmd.help) + "\nAliases: " + ", ".join(cmd.names))
        return
    lines = ["Usage: keysmith <command> [args]", "Commands:"]
    for type_ in CommandType:
        for cmd in sorted((c for c in commands if c.type == type_),
                key=lambda c: c.names[0]):
            lines.append("  " + cmd.help[0])
    s.say("\n".join(lines))

register_command(Command(
    CommandType.GENERAL,
    (
        "help [command]: List commands, or describe one",
        "Settings are read from session_settings.json if present; "
            "options given on the command line override them for one run."
    ),
    ("help", "h"),
    cmd_help
))

# Backend functions for the commands

def load_corpus(args: list[str], s: Session) -> Optional[Corpus]:
    if not args:
        s.say("Missing corpus file", session.red)
        return None
    try:
        corpus_ = get_corpus(args[0])
    except OSError as e:
        s.say(f"Could not read corpus {args[0]}: {e}", session.red)
        return None
    if not corpus_.length:
        s.say(f"Corpus {args[0]} is empty", session.red)
        return None
    return corpus_

def load_inputs(args: list[str], s: Session):
    """Returns (corpus, layout) from args, or (None, None) after reporting
    what went wrong.
    """
    corpus_ = load_corpus(args, s)
    if corpus_ is None:
        return None, None
    if len(args) < 2:
        return corpus_, layout.INIT_LAYOUT
    try:
        return corpus_, layout.get_layout(args[1])
    except OSError as e:
        s.say(f"Could not read layout {args[1]}: {e}", session.red)
        return None, None
