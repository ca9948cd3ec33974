# SPDX-License-Identifier: MIT OR Apache-2.0
# Copyright (c) 2025 John William Creighton (s243a)
"""
Command line interface for the recomputation pipeline.

Operates on a JSON Lines store file (see bubblefield.io):

    bubblefield recompute spaces.jsonl
    bubblefield recompute spaces.jsonl --stage similarities --threshold 0.4
    bubblefield similar spaces.jsonl --name "Jazz Club" --tags music jazz
    bubblefield add spaces.jsonl --name "Jazz Club" --tags music jazz
    bubblefield set-threshold spaces.jsonl 0.35
    bubblefield export-layout spaces.jsonl > layout.jsonl
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import load_config
from .io import write_records
from .models import LayoutUpdate
from .pipeline import PipelineError, RecomputePipeline
from .store import JsonLinesSpaceStore

logger = logging.getLogger(__name__)

STAGES = ('all', 'vectors', 'similarities', 'clusters', 'layout')


def _pipeline(args) -> RecomputePipeline:
    config = load_config(args.config)
    if getattr(args, 'resolution', None) is not None:
        config.resolution = args.resolution
        config.validate()
    return RecomputePipeline(JsonLinesSpaceStore(args.store), config)


def cmd_recompute(args) -> int:
    pipeline = _pipeline(args)
    if args.stage == 'all':
        summary = pipeline.recompute_all(args.threshold)
    elif args.stage == 'vectors':
        summary = pipeline.recompute_vectors()
    elif args.stage == 'similarities':
        summary = pipeline.recompute_similarities(args.threshold)
    elif args.stage == 'clusters':
        summary = pipeline.recompute_clusters()
    else:
        summary = pipeline.recompute_layout()
    print(json.dumps(summary))
    return 0


def cmd_similar(args) -> int:
    pipeline = _pipeline(args)
    matches = pipeline.find_similar_spaces(args.name, args.tags, args.threshold)
    print(json.dumps({"exists": bool(matches), "similar_spaces": matches}, indent=2))
    return 0


def cmd_add(args) -> int:
    pipeline = _pipeline(args)
    space_id = pipeline.create_space_and_recluster(args.name, args.tags, args.color)
    print(json.dumps({"space_id": space_id}))
    return 0


def cmd_set_threshold(args) -> int:
    pipeline = _pipeline(args)
    threshold = pipeline.set_similarity_threshold(args.threshold)
    print(json.dumps({"similarity_threshold": threshold}))
    return 0


def cmd_export_layout(args) -> int:
    store = JsonLinesSpaceStore(args.store)
    updates = [
        LayoutUpdate(space_id=s.id, position=s.position,
                     cluster_id=s.cluster_id if s.cluster_id is not None else 0)
        for s in store.list_spaces()
    ]
    write_records(updates, sys.stdout)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='bubblefield',
        description="Recompute vectors, similarity links, clusters and layout of spaces"
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    parser.add_argument('--config', '-c', help='YAML config file')
    subparsers = parser.add_subparsers(dest='command', required=True)

    recompute_parser = subparsers.add_parser('recompute', help='Run pipeline stages')
    recompute_parser.add_argument('store', help='JSON Lines store file')
    recompute_parser.add_argument('--stage', choices=STAGES, default='all',
                                  help='Stage to run (default: all)')
    recompute_parser.add_argument('--threshold', '-t', type=float,
                                  help='Similarity threshold override')
    recompute_parser.add_argument('--resolution', type=float,
                                  help='Louvain resolution override')

    similar_parser = subparsers.add_parser('similar', help='Find spaces similar to a candidate')
    similar_parser.add_argument('store', help='JSON Lines store file')
    similar_parser.add_argument('--name', required=True)
    similar_parser.add_argument('--tags', nargs='*', default=[])
    similar_parser.add_argument('--threshold', '-t', type=float)

    add_parser = subparsers.add_parser('add', help='Create a space and recluster')
    add_parser.add_argument('store', help='JSON Lines store file')
    add_parser.add_argument('--name', required=True)
    add_parser.add_argument('--tags', nargs='*', default=[])
    add_parser.add_argument('--color', default='')

    threshold_parser = subparsers.add_parser('set-threshold',
                                             help='Store the similarity threshold')
    threshold_parser.add_argument('store', help='JSON Lines store file')
    threshold_parser.add_argument('threshold', type=float)

    export_parser = subparsers.add_parser('export-layout',
                                          help='Write layout records to stdout')
    export_parser.add_argument('store', help='JSON Lines store file')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s: %(message)s')

    commands = {
        'recompute': cmd_recompute,
        'similar': cmd_similar,
        'add': cmd_add,
        'set-threshold': cmd_set_threshold,
        'export-layout': cmd_export_layout,
    }
    try:
        return commands[args.command](args)
    except (PipelineError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
