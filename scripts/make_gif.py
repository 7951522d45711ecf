import os, glob, argparse
import imageio.v2 as imageio

def make_gif(src, out, fps=20):
    """Write the progress_*.png frames under `src` to `out`; returns the frame count."""
    frames = sorted(glob.glob(os.path.join(src, "progress_*.png")))
    if not frames:
        raise SystemExit(f"❌ no progress_*.png frames in {src} (run with --save_every)")
    os.makedirs(os.path.dirname(out) or ".", exist_ok=True)
    imgs = [imageio.imread(f) for f in frames]
    imageio.mimsave(out, imgs, duration=1000.0 / max(1, fps))  # ms per frame
    return len(frames)

def main(argv=None):
    ap = argparse.ArgumentParser(description="Assemble progress frames into a GIF")
    ap.add_argument("--src", default="outputs_threads/progress_frames")
    ap.add_argument("--out", default="outputs_threads/progress.gif")
    ap.add_argument("--fps", type=int, default=20)
    args = ap.parse_args(argv)

    n = make_gif(args.src, args.out, args.fps)
    print(f"✅ saved {args.out} ({n} frames)")

if __name__ == "__main__":
    main()
