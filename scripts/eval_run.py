#!/usr/bin/env python3
import argparse, json, os, cv2, numpy as np

from utils.preprocess_image import preprocess_image

def ssim_simple(x, y, C1=0.01**2, C2=0.03**2):
    x = x.astype(np.float32); y = y.astype(np.float32)
    mu_x = cv2.GaussianBlur(x, (11,11), 1.5); mu_y = cv2.GaussianBlur(y, (11,11), 1.5)
    sigma_x = cv2.GaussianBlur(x*x,(11,11),1.5) - mu_x*mu_x
    sigma_y = cv2.GaussianBlur(y*y,(11,11),1.5) - mu_y*mu_y
    sigma_xy= cv2.GaussianBlur(x*y,(11,11),1.5) - mu_x*mu_y
    num = (2*mu_x*mu_y + C1)*(2*sigma_xy + C2)
    den = (mu_x*mu_x + mu_y*mu_y + C1)*(sigma_x + sigma_y + C2)
    return float((num/(den+1e-12)).mean())

def compare(target_rgba, result_bgr):
    '''(mean abs RGB error in 0..255, SSIM on luma in 0..1)'''
    tgt = cv2.cvtColor(target_rgba, cv2.COLOR_RGBA2BGR)
    mae = float(np.abs(tgt.astype(np.int16) - result_bgr.astype(np.int16)).mean())
    g1 = cv2.cvtColor(tgt, cv2.COLOR_BGR2GRAY).astype(np.float32) / 255.0
    g2 = cv2.cvtColor(result_bgr, cv2.COLOR_BGR2GRAY).astype(np.float32) / 255.0
    return mae, ssim_simple(g1, g2)

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument('--out_dir', required=True)
    ap.add_argument('--target', default=None, help='defaults to the image named in recipe.json')
    args = ap.parse_args()

    # read recipe to mirror the working size
    with open(os.path.join(args.out_dir, 'recipe.json'), 'r', encoding='utf-8') as f:
        recipe = json.load(f)
    H, W = recipe['size']
    target_path = args.target or os.path.join(args.out_dir, recipe['image'])
    tgt = preprocess_image(target_path, size=(H, W))

    sim = cv2.imread(os.path.join(args.out_dir, 'simulated_result.png'), cv2.IMREAD_COLOR)
    if sim is None:
        raise FileNotFoundError('❌ simulated_result.png not found in ' + args.out_dir)
    if sim.shape[:2] != (H, W):
        sim = cv2.resize(sim, (W, H), interpolation=cv2.INTER_AREA)

    mae, ssim = compare(tgt, sim)
    print(f"MAE (target vs simulated): {mae:.2f}")
    print(f"SSIM (luma): {ssim:.4f}")
    print("Lines:", recipe['stats']['lines_drawn'], "Stop:", recipe['stats']['stop_reason'],
          "Seconds:", recipe['stats']['seconds'])

if __name__ == '__main__':
    main()
