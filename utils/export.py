# utils/export.py
import csv
import json
import os

import cv2
import numpy as np

def interleaved_segments(run):
    """Global chord order as (thread_index, from_nail, to_nail)."""
    pos = [0] * len(run.threads)
    out = []
    for idx in run.move_log:
        hist = run.threads[idx].history
        k = pos[idx]
        out.append((idx, hist[k], hist[k + 1]))
        pos[idx] = k + 1
    return out

def nail_sequence_text(run):
    '''
    Plain-text nail sequence, one block per run of consecutive moves by the
    same thread:

        <n> connections in total

        Thread: [r, g, b]
        0
        17
        ...
    '''
    threads = run.threads
    for t in threads:
        t.reset_read_head()
    parts = [f"{run.iteration} connections in total\n\n"]
    prev = None
    try:
        for idx in run.move_log:
            thread = threads[idx]
            if idx != prev:
                parts.append(f"\nThread: {thread.color.rgb()}\n")
            if thread.read_head == 0:
                parts.append(f"{thread.next_history_nail()}\n")  # start nail
            parts.append(f"{thread.next_history_nail()}\n")
            prev = idx
    finally:
        for t in threads:
            t.reset_read_head()
    return ''.join(parts)

def export_nail_sequence(out_path, run):
    os.makedirs(os.path.dirname(out_path) or '.', exist_ok=True)
    with open(out_path, 'w', encoding='utf-8') as f:
        f.write(nail_sequence_text(run))

def export_svg_color(out_path, run, w, h, stroke_px=1.0, scale=1.0, background='#808080'):
    '''
    SVG of the chord sequence, one group per thread color, in drawing order
    within each group.
    '''
    os.makedirs(os.path.dirname(out_path) or '.', exist_ok=True)
    W2, H2 = int(round(w * scale)), int(round(h * scale))
    parts = [f'<svg xmlns="http://www.w3.org/2000/svg" width="{W2}" height="{H2}" viewBox="0 0 {W2} {H2}">\n']
    if background:
        parts.append(f'  <rect width="{W2}" height="{H2}" fill="{background}" />\n')
    parts.append('  <g fill="none" stroke-linecap="round" stroke-linejoin="round">\n')
    by_thread = {k: [] for k in range(len(run.threads))}
    for idx, a, b in interleaved_segments(run):
        by_thread[idx].append((a, b))
    for k, thread in enumerate(run.threads):
        if not by_thread[k]:
            continue
        parts.append(f'    <g stroke="{thread.color.hex()}" stroke-width="{stroke_px}">\n')
        for a, b in by_thread[k]:
            x1, y1 = run.nails[a]; x2, y2 = run.nails[b]
            parts.append(f'      <line x1="{int(round(x1*scale))}" y1="{int(round(y1*scale))}" '
                         f'x2="{int(round(x2*scale))}" y2="{int(round(y2*scale))}" />\n')
        parts.append('    </g>\n')
    parts.append('  </g>\n</svg>\n')
    with open(out_path, 'w', encoding='utf-8') as f:
        f.writelines(parts)

def render_preview(run, scale=1.0):
    '''Current approximation as a BGR uint8 image for cv2.imwrite.'''
    rgba = run.buffers.current
    bgr = cv2.cvtColor(rgba, cv2.COLOR_RGBA2BGR)
    if scale != 1.0:
        h, w = bgr.shape[:2]
        bgr = cv2.resize(bgr, (int(round(w*scale)), int(round(h*scale))), interpolation=cv2.INTER_NEAREST)
    return bgr

def save_progress_frame(out_dir, run, step):
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f'progress_{int(step):05d}.png')
    cv2.imwrite(path, render_preview(run))
    return path

def write_moves_csv(out_path, run, weights=None):
    '''t,thread,i,j,weight rows in global order (weight blank when unknown).'''
    os.makedirs(os.path.dirname(out_path) or '.', exist_ok=True)
    with open(out_path, 'w', newline='', encoding='utf-8') as f:
        w = csv.writer(f)
        w.writerow(['t', 'thread', 'i', 'j', 'weight'])
        for t, (idx, a, b) in enumerate(interleaved_segments(run), start=1):
            wt = weights[t - 1] if weights is not None and t - 1 < len(weights) else ''
            w.writerow([t, idx, a, b, wt])

def _jsonable(v):
    if isinstance(v, (np.integer,)):
        return int(v)
    if isinstance(v, (np.floating,)):
        return float(v)
    return v

def write_recipe(out_path, run, image=None, size=None, layout=None, stop_reason=None, seconds=None):
    recipe = dict(
        image=image,
        size=list(size) if size is not None else None,
        layout=layout or {},
        params={k: _jsonable(v) for k, v in run.P.items()},
        palette=[[c.r, c.g, c.b, c.a] for c in run.palette],
        sequence=[[int(i), int(a), int(b)] for i, a, b in interleaved_segments(run)],
        thread_order=list(run.move_log),
        stats=dict(lines_drawn=run.iteration,
                   stop_reason=str(stop_reason.value) if stop_reason is not None else None,
                   seconds=seconds),
    )
    os.makedirs(os.path.dirname(out_path) or '.', exist_ok=True)
    with open(out_path, 'w', encoding='utf-8') as f:
        json.dump(recipe, f, indent=2)
    return recipe
