from __future__ import annotations

"""Command-line interface for build-sourcemaps.

Loads each file from disk, discovers its source map, then re-emits it with an
inline map (default) or an external `.map` file (`--maps DIR`).
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .errors import SourceMapError
from .exporter import embed_source_map
from .importer import discover_source_map
from .types import AddOptions, VirtualFile, WriteOptions
from .writer import plan_layout, write_files


def build_parser() -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        description="Attach, normalize and re-emit source maps for build outputs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    build-sourcemaps dist/app.js -b dist -o out              # Inline map
    build-sourcemaps dist/app.js -b dist --load-maps --maps . # External app.js.map
    build-sourcemaps dist/*.css -b dist -n                    # Dry run
        """,
    )


def load_file(path: Path, base: Path) -> VirtualFile:
    return VirtualFile(
        cwd=str(Path.cwd()),
        base=str(base.resolve()),
        path=str(path.resolve()),
        contents=path.read_bytes(),
    )


async def process_files(
    files: list[VirtualFile],
    maps_dir: str | None,
    add_options: AddOptions,
    write_options: WriteOptions,
) -> list[VirtualFile]:
    async def process(file: VirtualFile) -> list[VirtualFile]:
        await discover_source_map(file, add_options)
        return await embed_source_map(file, maps_dir, write_options)

    results = await asyncio.gather(*(process(f) for f in files))
    return [out for outputs in results for out in outputs]


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    parser.add_argument("files", nargs="+", help="Files to process")
    parser.add_argument("-b", "--base", default=".", help="Base directory the files are relative to")
    parser.add_argument("-o", "--output", dest="output_dir", help="Output directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="List each file")
    parser.add_argument("-n", "--dry-run", action="store_true", help="List files without writing")
    parser.add_argument("--debug", action="store_true", help="Log missing maps and sources")
    parser.add_argument("--load-maps", action="store_true", help="Import existing inline or external maps")
    parser.add_argument("--maps", dest="maps_dir", help="Write external maps to this directory (relative to base)")
    parser.add_argument("--dest-path", help="Directory the files are finally written to, relative to cwd")
    parser.add_argument("--source-root", help="sourceRoot to declare in the emitted map")
    parser.add_argument("--url-prefix", help="Prefix for the sourceMappingURL of external maps")
    parser.add_argument("--url", help="Use this sourceMappingURL verbatim")
    parser.add_argument("--charset", default="utf8", help="Charset declared in inline data URLs")
    parser.add_argument("--no-content", action="store_true", help="Omit sourcesContent")
    parser.add_argument("--no-comment", action="store_true", help="Do not append a sourceMappingURL comment")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    base = Path(args.base)
    paths = [Path(p) for p in args.files]
    for path in paths:
        if not path.is_file():
            print(f"Error: {path} not found", file=sys.stderr)
            return 1

    output_dir = Path(args.output_dir) if args.output_dir else Path(f"{base.resolve().name}_out")

    add_options = AddOptions(load_maps=args.load_maps, debug=args.debug)
    write_options = WriteOptions(
        include_content=not args.no_content,
        add_comment=not args.no_comment,
        charset=args.charset,
        source_root=args.source_root,
        dest_path=args.dest_path,
        source_mapping_url_prefix=args.url_prefix,
        source_mapping_url=args.url,
        debug=args.debug,
    )

    try:
        files = [load_file(p, base) for p in paths]
        outputs = asyncio.run(process_files(files, args.maps_dir, add_options, write_options))
    except (OSError, SourceMapError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    layout = plan_layout(outputs)
    if args.dry_run:
        print(f"Would write {len(layout)} files to {output_dir}/")
        for f, relative in layout:
            print(f"  {relative} ({len(f.contents)} bytes)")
        return 0

    output_dir.mkdir(parents=True, exist_ok=True)
    count = write_files(outputs, output_dir, verbose=args.verbose)
    print(f"Wrote {count} files to {output_dir}/")
    if count != len(layout):
        print(f"Error: {len(layout) - count} files could not be written", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
