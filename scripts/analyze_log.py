import os, csv, argparse
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

def read_moves(path):
    ts, weights, threads = [], [], []
    with open(path, newline="", encoding="utf-8") as f:
        r = csv.DictReader(f)
        for row in r:
            if row["weight"] == "":
                continue
            ts.append(int(row["t"]))
            weights.append(float(row["weight"]))
            threads.append(int(row["thread"]))
    return ts, weights, threads

def main():
    ap = argparse.ArgumentParser(description="Plot chord weights per step from moves.csv")
    ap.add_argument("--log", default="outputs_threads/moves.csv")
    ap.add_argument("--out", default=None)
    args = ap.parse_args()

    ts, weights, threads = read_moves(args.log)
    plt.figure()
    for k in sorted(set(threads)):
        xs = [t for t, th in zip(ts, threads) if th == k]
        ys = [w for w, th in zip(weights, threads) if th == k]
        plt.plot(xs, ys, ".", markersize=2, label=f"thread {k}")
    plt.xlabel("step (t)"); plt.ylabel("weight (lower is better)")
    plt.legend(); plt.title("Thread selection dynamics")
    plt.tight_layout()
    out = args.out or os.path.join(os.path.dirname(args.log), "weights_plot.png")
    plt.savefig(out, dpi=150)
    print(f"✅ saved {out}")

if __name__ == "__main__":
    main()
