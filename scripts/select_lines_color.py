#!/usr/bin/env python3
# -*- coding: utf-8 -*-
'''
StrArt – multi-color thread routing.

Loads an image, fits it to the working canvas, places nails around the frame
and lets the greedy engine route every palette thread until the connection
budget is spent or no thread improves the image. Writes the nail sequence,
a preview, a move log, a replayable recipe and optionally an SVG.
'''
import os
import json
import time
import argparse

import cv2
from tqdm import tqdm

from utils.generate_nails import generate_nail_positions
from utils.preprocess_image import preprocess_image, working_resolution
from utils.palette import palette_for, parse_color
from utils.export import (
    export_nail_sequence, export_svg_color, render_preview, save_progress_frame,
    write_moves_csv, write_recipe,
)
from selection.run import Run, DEFAULT_PARAMS
from selection.greedy import GreedyEngine, StopReason

def _resolve_image_from_recipe(recipe_path, recipe_img):
    base = os.path.dirname(os.path.abspath(recipe_path))
    cands = [recipe_img] if os.path.isabs(recipe_img) else [
        os.path.join(base, recipe_img),
        os.path.join(base, "data", recipe_img),
        os.path.join("data", recipe_img),
        recipe_img,  # as-is (CWD)
    ]
    for p in cands:
        if os.path.exists(p):
            return p
    return None

def _apply_recipe(args):
    if not args.recipe:
        return args
    with open(args.recipe, 'r', encoding='utf-8') as f:
        R = json.load(f)

    # IMAGE: CLI wins if it exists; otherwise resolve from recipe
    if not (args.image and os.path.exists(args.image)):
        img_from_recipe = R.get('image', None)
        if img_from_recipe:
            resolved = _resolve_image_from_recipe(args.recipe, img_from_recipe)
            if resolved:
                args.image = resolved

    if R.get('size'):
        args.size = [int(R['size'][0]), int(R['size'][1])]
    lay = R.get('layout', {})
    args.nail_shape = lay.get('shape', args.nail_shape)

    P = R.get('params', {})
    args.num_nails        = int(P.get('num_nails', args.num_nails))
    args.num_lines        = int(P.get('max_connections', args.num_lines))
    args.downscale_factor = float(P.get('downscale_factor', args.downscale_factor))
    args.monochrome       = bool(P.get('monochrome', args.monochrome))
    args.start_nail       = int(P.get('start_nail', args.start_nail))
    args.workers          = int(P.get('workers', args.workers))
    args.no_eager         = not bool(P.get('eager', not args.no_eager))
    if P.get('seed') is not None:
        args.seed = int(P['seed'])
    if R.get('palette'):
        args.palette = [','.join(str(int(c)) for c in col) for col in R['palette']]
    return args

def build_parser():
    ap = argparse.ArgumentParser(description="Route colored threads between nails to approximate an image.")
    ap.add_argument('--image', type=str, default=None)
    ap.add_argument('--recipe', type=str, default=None,
                    help='Path to a recipe.json to replay a run; overrides CLI args except out_dir/export flags.')
    ap.add_argument('--out_dir', type=str, default='outputs_threads')

    # layout
    ap.add_argument('--nail_shape', type=str, default='circle', choices=['circle', 'rectangle'])
    ap.add_argument('--num_nails', type=int, default=DEFAULT_PARAMS['num_nails'])
    ap.add_argument('--size', type=int, nargs=2, default=None,
                    help='Working canvas H W (default: derived from --downscale_factor)')

    # thread model
    ap.add_argument('--num_lines', type=int, default=DEFAULT_PARAMS['max_connections'],
                    help='Maximum number of chords over all threads.')
    ap.add_argument('--downscale_factor', type=float, default=DEFAULT_PARAMS['downscale_factor'])
    ap.add_argument('--monochrome', action='store_true', help='Black and white threads only.')
    ap.add_argument('--palette', type=str, nargs='+', default=None,
                    help="Thread colors as 'r,g,b[,a]' (overrides --monochrome).")
    ap.add_argument('--start_nail', type=int, default=DEFAULT_PARAMS['start_nail'])
    ap.add_argument('--seed', type=int, default=123)
    ap.add_argument('--workers', type=int, default=1,
                    help='Threads used to score the palette in parallel each step.')
    ap.add_argument('--no_eager', action='store_true',
                    help='Recompute a thread\'s next move lazily instead of right after it moves.')

    # rendering / export
    ap.add_argument('--save_every', type=int, default=0, help='Save a progress frame every N chords (0=off).')
    ap.add_argument('--export_svg', action='store_true')
    ap.add_argument('--svg_stroke', type=float, default=0.5)
    ap.add_argument('--render_scale', type=float, default=1.0,
                    help='Scale factor for *rendering only* (preview & SVG). 1.0 = no scale.')
    ap.add_argument('--quiet', action='store_true', help='No progress bar.')
    return ap

def main(argv=None):
    args = build_parser().parse_args(argv)
    args = _apply_recipe(args)
    if not args.image:
        raise SystemExit('❌ --image is required (or a --recipe that names one)')

    if args.size is None:
        side = working_resolution(args.downscale_factor)
        args.size = [side, side]
    H, W = int(args.size[0]), int(args.size[1])

    target = preprocess_image(args.image, size=(H, W))
    nails = generate_nail_positions((H, W), count=args.num_nails, shape=args.nail_shape)
    palette = [parse_color(c) for c in args.palette] if args.palette else palette_for(args.monochrome)

    params = dict(
        num_nails=args.num_nails,
        max_connections=args.num_lines,
        downscale_factor=args.downscale_factor,
        monochrome=bool(args.monochrome),
        start_nail=args.start_nail,
        seed=args.seed,
        eager=not args.no_eager,
        workers=args.workers,
    )
    run = Run(nails, target, palette=palette, params=params)
    print(f"🧷 {len(nails)} nails ({args.nail_shape}, {W}x{H}), {len(palette)} threads, fade={run.fade:.4f}")

    os.makedirs(args.out_dir, exist_ok=True)
    progress_dir = os.path.join(args.out_dir, 'progress_frames')
    weights = []
    bar = tqdm(total=1.0, desc='Routing', unit='', bar_format='{l_bar}{bar}| {n:.3f}', disable=args.quiet)

    def on_progress(frac):
        bar.n = frac
        bar.refresh()

    def on_step(t, info):
        weights.append(info['weight'])
        if args.save_every and t % args.save_every == 0:
            save_progress_frame(progress_dir, run, t)

    engine = GreedyEngine(run, on_progress=on_progress, on_step=on_step)
    t0 = time.time()
    try:
        reason = engine.run_to_end()
    except KeyboardInterrupt:
        engine.cancel()
        reason = engine.run_to_end()
    finally:
        bar.close()
        engine.close()
    dt = time.time() - t0

    if reason is StopReason.CANCELLED:
        print(f'⚠️ cancelled after {run.iteration} chords, nothing written')
        return reason

    print(f'✅ {reason.value}: {run.iteration} chords in {dt:.2f}s, residual={run.buffers.residual():.2f}')

    seq_path = os.path.join(args.out_dir, 'nail_sequence.txt')
    export_nail_sequence(seq_path, run)
    print(f'🧵 nail sequence: {seq_path}')

    preview_path = os.path.join(args.out_dir, 'simulated_result.png')
    cv2.imwrite(preview_path, render_preview(run, scale=max(1.0, args.render_scale)))
    print(f'🖼️ preview: {preview_path}')

    if args.export_svg:
        svg_path = os.path.join(args.out_dir, 'threads.svg')
        export_svg_color(svg_path, run, W, H, stroke_px=args.svg_stroke, scale=max(1.0, args.render_scale))
        print(f'🖨️  SVG: {svg_path}')

    try:
        csv_path = os.path.join(args.out_dir, 'moves.csv')
        write_moves_csv(csv_path, run, weights)
        print(f'📝 log: {csv_path}')
    except OSError as e:
        print(f'⚠️ could not write moves.csv: {e}')

    try:
        recipe_path = os.path.join(args.out_dir, 'recipe.json')
        recipe_dir = os.path.dirname(os.path.abspath(recipe_path))
        img_for_recipe = args.image if os.path.isabs(args.image) else os.path.relpath(args.image, start=recipe_dir)
        write_recipe(recipe_path, run, image=img_for_recipe, size=[H, W],
                     layout=dict(shape=args.nail_shape, num_nails=args.num_nails),
                     stop_reason=reason, seconds=dt)
        print(f'📦 recipe: {recipe_path}')
    except OSError as e:
        print(f'⚠️ could not write recipe.json: {e}')

    return reason

if __name__ == '__main__':
    main()
