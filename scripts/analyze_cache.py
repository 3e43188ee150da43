"""Summarize path cache files as a markdown table."""

import sys
from pathlib import Path

from fieldpath.cache.store import load_cache
from fieldpath.exceptions import FieldPathError

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
DATA_DIR = PROJECT_ROOT / "data"


def analyze_cache(filepath: Path) -> dict | None:
    """Extract entry counts and path length statistics from one cache file.

    Returns dict with keys: starts, entries, avg_steps, max_steps, longest,
    or None if the file could not be loaded.
    """
    try:
        cache = load_cache(filepath)
    except FieldPathError as e:
        print(f"Skipping {filepath.name}: {e}", file=sys.stderr)
        return None

    steps = []
    longest = None
    for start, goal, path in cache.entries():
        n = len(path) - 1
        steps.append(n)
        if longest is None or n > longest[2]:
            longest = (start, goal, n)

    return {
        "starts": len(cache.starts()),
        "entries": len(cache),
        "avg_steps": sum(steps) / len(steps) if steps else 0.0,
        "max_steps": max(steps) if steps else 0,
        "longest": f"{longest[0].key()}->{longest[1].key()}" if longest else "-",
    }


def main():
    targets = [Path(arg) for arg in sys.argv[1:]] or [DATA_DIR]

    cache_files: list[Path] = []
    for target in targets:
        if target.is_dir():
            cache_files.extend(sorted(target.glob("*.json")))
        elif target.exists():
            cache_files.append(target)
        else:
            print(f"Not found: {target}", file=sys.stderr)

    if not cache_files:
        print("No cache files found", file=sys.stderr)
        sys.exit(1)

    rows = []
    for cf in cache_files:
        result = analyze_cache(cf)
        if result is None:
            continue
        result["file"] = cf.name
        rows.append(result)
    rows.sort(key=lambda r: r["entries"], reverse=True)

    print(f"Analyzed {len(rows)} cache file(s) ({len(cache_files) - len(rows)} skipped)\n")

    print("| File | Starts | Entries | Avg Steps | Max Steps | Longest Pair |")
    print("|------|-------:|--------:|----------:|----------:|--------------|")
    for r in rows:
        print(f"| {r['file']} | {r['starts']} | {r['entries']} "
              f"| {r['avg_steps']:.1f} | {r['max_steps']} | {r['longest']} |")


if __name__ == "__main__":
    main()
