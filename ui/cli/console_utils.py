# ui/cli/console_utils.py
import sys
from typing import List

from config import FRAME_WIDTH
from embedvault.types import SearchResult

def print_header(title):
    """Print a clean header with title."""
    print("\n" + "═" * FRAME_WIDTH)
    print(f"  {title}")
    print("═" * FRAME_WIDTH)

def print_error(message):
    """Print an error line to stderr."""
    print(f"  ❌ Error: {message}", file=sys.stderr)

def get_similarity_color(similarity: float) -> str:
    """Get a color indicator for similarity score."""
    if similarity >= 0.9997:
        return "🔵"  # Blue - identical direction
    if similarity >= 0.85:
        return "🟢"
    elif similarity >= 0.7:
        return "🟡"
    elif similarity >= 0.5:
        return "🟠"
    elif similarity >= 0:
        return "🔴"
    else:
        return "🟣"  # Purple - pointing away

def format_vector(vector, max_items: int = 8) -> str:
    """Short printable form of a vector, e.g. [1.0000, 0.5000, ... (+120)]."""
    values = [f"{float(v):.4f}" for v in vector[:max_items]]
    if len(vector) > max_items:
        values.append(f"... (+{len(vector) - max_items})")
    return "[" + ", ".join(values) + "]"

def print_results(results: List[SearchResult], show_vectors: bool = False):
    """Print ranked search results."""
    if not results:
        print("  No matching vectors.")
        return

    print()
    for rank, result in enumerate(results, 1):
        color = get_similarity_color(result.score)
        print(f"  {rank:>3}. {color} {result.id} -> {result.score:.4f}")
        if show_vectors and result.vector is not None:
            print(f"         {format_vector(result.vector)}")
        if result.metadata:
            print(f"         {result.metadata}")

def format_elapsed_time(seconds: float) -> str:
    """Format a duration, down to microseconds for single searches."""
    if seconds < 0.001:
        return f"{seconds * 1_000_000:.0f}µs"
    if seconds < 0.01:
        return f"{seconds * 1000:.2f}ms"
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"

    minutes, seconds = divmod(int(seconds), 60)
    if minutes < 60:
        return f"{minutes}m {seconds:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"
