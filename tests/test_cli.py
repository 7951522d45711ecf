"""Smoke test for the command line entry point.

Run:
    pytest tests/test_cli.py -v
"""
import json

import cv2
import numpy as np

from selection.greedy import StopReason
from scripts.select_lines_color import main


def write_image(path):
    img = np.full((40, 40, 3), 200, np.uint8)
    cv2.circle(img, (20, 20), 10, (0, 0, 0), -1)
    cv2.imwrite(str(path), img)


def test_main_writes_outputs_and_replays(tmp_path):
    image = tmp_path / 'disc.png'
    write_image(image)
    out = tmp_path / 'out'
    reason = main(['--image', str(image), '--out_dir', str(out), '--size', '33', '33',
                   '--num_nails', '16', '--num_lines', '12', '--monochrome',
                   '--export_svg', '--quiet'])
    assert reason in (StopReason.BUDGET_EXHAUSTED, StopReason.ALL_THREADS_EXHAUSTED)
    for name in ('nail_sequence.txt', 'simulated_result.png', 'threads.svg', 'moves.csv', 'recipe.json'):
        assert (out / name).exists()

    R = json.loads((out / 'recipe.json').read_text(encoding='utf-8'))
    assert R['size'] == [33, 33]
    assert R['params']['num_nails'] == 16

    out2 = tmp_path / 'replay'
    main(['--recipe', str(out / 'recipe.json'), '--out_dir', str(out2), '--quiet'])
    assert (out2 / 'nail_sequence.txt').read_text() == (out / 'nail_sequence.txt').read_text()
