import json
import sys
import matplotlib.pyplot as plt


def load_log(path):
    with open(path, "r") as f:
        return json.load(f)


def main(log_path="logs/sim.json"):
    data = load_log(log_path)
    ts = [entry["t"] for entry in data]
    groups = sorted({g for entry in data for g in entry.get("spread", {})}, key=int)
    for g in groups:
        spread = [entry.get("spread", {}).get(g, float("nan")) for entry in data]
        plt.plot(ts, spread, label=f"group {g}")

    plt.xlabel("time")
    plt.ylabel("mean follower distance to leader")
    plt.title("Group spread over time")
    if groups:
        plt.legend()
    plt.show()


if __name__ == "__main__":
    log = sys.argv[1] if len(sys.argv) > 1 else "logs/sim.json"
    main(log)
