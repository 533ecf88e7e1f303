# main.py
import argparse
import json
import logging
import sys
import time
from pathlib import Path

from tqdm import tqdm

from config import PathConfig, VERSION
from embedvault.errors import EmbedVaultError
from embedvault.similarity_engine import KernelDispatcher, SimilarityEngine
from embedvault.storage import MemoryStore, RichVectorStore, SQLiteVectorStore, import_vectors
from embedvault.utilities.config_manager import get_config_manager
from embedvault.utilities.cpu_utils import print_cpu_info
from embedvault.utilities.vector_validation import parse_vector
from ui.cli.console_utils import (
    format_elapsed_time, format_vector, print_error, print_header, print_results
)
from ui.cli.repl import run_repl

logger = logging.getLogger(__name__)

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="embedvault",
        description="Embedded vector store with cosine similarity search"
    )
    parser.add_argument('--version', action='version', version=f"embedvault {VERSION}")
    parser.add_argument(
        '--db',
        type=Path,
        default=None,
        help=f"Database file (default: {PathConfig.get_database_file()})"
    )
    parser.add_argument(
        '--memory',
        action='store_true',
        help='Use a throwaway in-memory store instead of the database'
    )
    parser.add_argument(
        '--dim',
        type=int,
        default=None,
        help='Fixed vector dimension for the in-memory store (0 = any)'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('init', help='Create the vector store')

    add = commands.add_parser('add', help='Add a vector')
    add.add_argument('id')
    add.add_argument('vector', nargs='+', help='Components, space or comma separated')
    add.add_argument('--meta', default=None, help='Metadata as a JSON object (database only)')

    search = commands.add_parser('search', help='Search for similar vectors')
    search.add_argument('vector', nargs='+', help='Query components, space or comma separated')
    search.add_argument('-k', type=int, default=None, help='Number of results (0 = all)')
    search.add_argument(
        '--metadata',
        action='store_true',
        help="Use the database's own search and show stored metadata"
    )

    get = commands.add_parser('get', help='Show a stored vector')
    get.add_argument('id')

    import_cmd = commands.add_parser('import', help='Import vectors from a JSON file ({"id": [..], ...})')
    import_cmd.add_argument('file', type=Path)

    export_cmd = commands.add_parser('export', help='Export every vector to a JSON file')
    export_cmd.add_argument('file', type=Path)

    commands.add_parser('info', help='Show CPU, kernel and store information')
    commands.add_parser('repl', help='Interactive mode')

    return parser

def open_store(args, config_manager, dispatcher):
    if args.memory:
        dimension = args.dim if args.dim is not None else config_manager.get_dimension()
        return MemoryStore(dimension)
    return SQLiteVectorStore(args.db or PathConfig.get_database_file(), dispatcher=dispatcher)

def _read_metadata(raw):
    if raw is None:
        return None
    metadata = json.loads(raw)
    if not isinstance(metadata, dict):
        raise ValueError("Metadata must be a JSON object")
    return metadata

def cmd_init(args, store, engine, config_manager):
    location = "memory" if args.memory else store.db_path
    print(f"  ✅ Store ready at {location}")

def cmd_add(args, store, engine, config_manager):
    vector = parse_vector(args.vector)
    metadata = _read_metadata(args.meta)

    if isinstance(store, RichVectorStore):
        norm = store.add(args.id, vector, metadata)
        print(f"  ✅ Vector added: {args.id} (norm {norm:.4f})")
        return

    if metadata is not None:
        raise ValueError("Metadata requires the database store")
    engine.add(args.id, vector)
    print(f"  ✅ Vector added: {args.id}")

def cmd_search(args, store, engine, config_manager):
    query = parse_vector(args.vector)
    k = args.k if args.k is not None else config_manager.get_top_k()

    start_time = time.perf_counter()
    if args.metadata:
        if not isinstance(store, RichVectorStore):
            raise ValueError("--metadata requires the database store")
        results = store.search(query, k)
    else:
        results = engine.search(query, k)
    elapsed = time.perf_counter() - start_time

    print_header(f"Results (k={k})")
    print_results(results)
    print(f"\n  Search took {format_elapsed_time(elapsed)}")

def cmd_get(args, store, engine, config_manager):
    if isinstance(store, RichVectorStore):
        record = store.get(args.id)
        print(f"  {record.id} ({record.dimension} dims, norm {record.norm:.4f})")
        print(f"    {format_vector(record.vector)}")
        if record.metadata is not None:
            print(f"    {json.dumps(record.metadata)}")
        return

    vector = store.get_vector(args.id)
    print(f"  {args.id} ({len(vector)} dims)")
    print(f"    {format_vector(vector)}")

def cmd_import(args, store, engine, config_manager):
    with open(args.file, 'r') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{args.file} must hold a JSON object mapping ids to vectors")

    start_time = time.time()
    with tqdm(total=len(data), unit='vectors', unit_scale=True) as progress_bar:
        imported = import_vectors(store, data, progress=progress_bar.update)

    print(f"  ✅ Imported {imported:,} vectors in {format_elapsed_time(time.time() - start_time)}")

def cmd_export(args, store, engine, config_manager):
    if isinstance(store, SQLiteVectorStore):
        vectors = store.export_vectors()
    else:
        vectors = store.get_all_vectors()

    args.file.parent.mkdir(parents=True, exist_ok=True)
    with open(args.file, 'w') as f:
        json.dump({vector_id: vector.tolist() for vector_id, vector in vectors.items()}, f)
    print(f"  ✅ Exported {len(vectors):,} vectors to {args.file}")

def cmd_info(args, store, engine, config_manager):
    print_header(f"embedvault {VERSION}")
    print_cpu_info()

    dispatcher = engine.dispatcher
    print(f"\n  Kernel: {dispatcher.kernel_name}")
    print(f"    Block size: {dispatcher.block_size}"
          f" ({'auto-tuned' if dispatcher.config.auto_tune else 'fixed'})")
    print(f"    Batch workers: {dispatcher.config.effective_workers()}")

    location = "memory" if args.memory else store.db_path
    print(f"\n  Store: {location}")
    print(f"    Vectors: {len(store):,}")

def cmd_repl(args, store, engine, config_manager):
    run_repl(engine, config_manager.get_top_k())

COMMANDS = {
    'init': cmd_init,
    'add': cmd_add,
    'search': cmd_search,
    'get': cmd_get,
    'import': cmd_import,
    'export': cmd_export,
    'info': cmd_info,
    'repl': cmd_repl,
}

def main(argv=None) -> int:
    """Main entry point for the embedvault command line."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    config_manager = get_config_manager()
    dispatcher = KernelDispatcher(config=config_manager.kernel_config())
    try:
        with open_store(args, config_manager, dispatcher) as store:
            engine = SimilarityEngine(store, dispatcher=dispatcher)
            COMMANDS[args.command](args, store, engine, config_manager)
    except (EmbedVaultError, ValueError, OSError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print_error(e)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
