import argparse
import json
import logging
import os
from typing import List, Sequence

from .data import load_fields
from .model import Params
from .optimizer import Covering, optimize_fields


def format_covering(covering: Covering) -> List[str]:
    lines = [
        f"Cardinality:{covering.cardinality}",
        f"Cost:{covering.cost}",
        '=' * covering.field.n_cols,
    ]
    lines.extend(covering.render())
    lines.append('')
    return lines


def write_report(out_path: str, coverings: Sequence[Covering]) -> None:
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    with open(out_path, 'w') as f:
        for covering in coverings:
            for line in format_covering(covering):
                f.write(line + '\n')
        f.write(f"Total Cost: {sum(c.cost for c in coverings)}\n")


def main(argv=None) -> None:
    ap = argparse.ArgumentParser(description='Cover the marked cells of each field with a low-cost set of rectangles.')
    ap.add_argument('file', nargs='?', default='strawberries.txt', help='Input file of fields (@ marked, . empty)')
    ap.add_argument('-o', '--output', default='optimal_covering.txt', help='Output path for the rendered coverings')
    ap.add_argument('--summary-out', default=None, help='Optional JSON with per-field rectangles')
    ap.add_argument('--max-rectangles', type=int, default=None,
                    help='Cardinality bound applied to every field, overriding the bound lines in the input')
    ap.add_argument('--overhead', type=int, default=10, help='Fixed cost per rectangle')
    ap.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])

    args = ap.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    try:
        params = Params(overhead=args.overhead)
        fields = load_fields(args.file)
        if args.max_rectangles is not None:
            for fld in fields:
                fld.max_rectangles = args.max_rectangles
        coverings = optimize_fields(fields, params)
    except (OSError, ValueError) as e:
        raise SystemExit(f'error: {e}')

    write_report(args.output, coverings)

    if args.summary_out:
        out_dir = os.path.dirname(args.summary_out)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        meta = {
            'input': args.file,
            'params': {'overhead': params.overhead},
            'total_cost': sum(c.cost for c in coverings),
            'fields': [c.to_dict() for c in coverings],
        }
        with open(args.summary_out, 'w') as f:
            json.dump(meta, f, indent=2)


if __name__ == '__main__':
    main()
