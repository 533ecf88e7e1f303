# ui/cli/repl.py
"""
Interactive prompt.

    add <id> 1,2,3     store a vector
    query 1,2,3        top-k search
    help               show commands
    quit               leave
"""
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory

from embedvault.errors import EmbedVaultError
from embedvault.similarity_engine.orchestrator import SimilarityEngine
from embedvault.utilities.vector_validation import parse_vector
from .console_utils import print_header, print_results

COMMANDS = ["add", "query", "help", "quit", "exit"]

def _print_help():
    print("\n  Commands:")
    print("    add <id> 1,2,3     Store a vector")
    print("    query 1,2,3        Find the most similar vectors")
    print("    help               Show this list")
    print("    quit               Leave interactive mode")

def handle_line(engine: SimilarityEngine, line: str, top_k: int) -> bool:
    """
    Run one REPL command.

    Returns:
        False when the session should end, True otherwise
    """
    fields = line.split()
    if not fields:
        return True

    command = fields[0].lower()
    if command in ("quit", "exit"):
        return False

    if command == "help":
        _print_help()
        return True

    if command == "add":
        if len(fields) < 3:
            print("  ⚠️  Usage: add <id> 1,2,3")
            return True
        try:
            engine.add(fields[1], parse_vector(fields[2:]))
        except (ValueError, EmbedVaultError) as e:
            print(f"  ⚠️  {e}")
            return True
        print(f"  ✅ Added: {fields[1]}")
        return True

    if command == "query":
        if len(fields) < 2:
            print("  ⚠️  Usage: query 1,2,3")
            return True
        try:
            results = engine.search(parse_vector(fields[1:]), top_k)
        except (ValueError, EmbedVaultError) as e:
            print(f"  ⚠️  {e}")
            return True
        print_results(results)
        return True

    print(f"  ⚠️  Unknown command: {command} (type 'help')")
    return True

def run_repl(engine: SimilarityEngine, top_k: int, session: Optional[PromptSession] = None):
    """Read commands until 'quit' or end of input."""
    print_header("embedvault interactive mode")
    _print_help()

    session = session or PromptSession(
        history=InMemoryHistory(),
        completer=WordCompleter(COMMANDS),
    )

    while True:
        try:
            line = session.prompt("\n> ")
        except KeyboardInterrupt:
            continue
        except EOFError:
            break

        if not handle_line(engine, line, top_k):
            break

    print("\n  Goodbye!")
