import os
import glob
import time
import hydra
import uproot
import awkward as ak
import multiprocessing
from itertools import repeat
from omegaconf import DictConfig
from vtxntuple.tools import general as g
from vtxntuple.tools.data_management.ntupelizer import VertexNtuplizer


def load_input_file(input_path: str, tree_path: str, branches: list) -> ak.Array:
    if input_path.endswith(".root"):
        with uproot.open(input_path) as in_file:
            return in_file[tree_path].arrays(list(branches))
    return g.load_parquet(input_path, columns=list(branches))


def save_to_file(data: ak.Array, output_path: str) -> None:
    print(f"Saving {len(data)} processed entries to {output_path}")
    ak.to_parquet(data, output_path)


def summarize(data: ak.Array) -> dict:
    summary = {"n_events": len(data)}
    if len(data) > 0:
        summary["n_events_without_primary_vertex"] = int(ak.sum(~data["has_primary_vertex"]))
        for key in ["nGV", "nGVs", "nGVn", "nGVns", "nRecoJets", "nRecoJetsGenMatch"]:
            summary[key] = int(ak.sum(data[key]))
    return summary


def process_single_file(input_path: str, output_path: str, cfg: DictConfig) -> None:
    if os.path.exists(output_path):
        print(f"File {output_path} already processed, skipping.")
        return
    start_time = time.time()
    print(f"Processing {input_path}")
    events = load_input_file(input_path, cfg.tree_path, cfg.branches)
    ntuplizer = VertexNtuplizer(cfg, verbosity=cfg.verbosity)
    if cfg.verbosity >= 1:
        ntuplizer.print_config()
    data = ntuplizer.process(events)
    save_to_file(data, output_path)
    g.save_to_json(summarize(data), output_path.replace(".parquet", "_summary.json"))
    print(f"Finished processing in {time.time() - start_time:.2f} s.")


def collect_paths(cfg: DictConfig):
    n_files = None if cfg.n_files == -1 else cfg.n_files
    input_paths = []
    output_paths = []
    for sample in cfg.samples_to_process:
        input_dir = os.path.expandvars(cfg.samples[sample].input_dir)
        sample_output_dir = os.path.join(os.path.expandvars(cfg.output_dir), sample)
        os.makedirs(sample_output_dir, exist_ok=True)
        sample_input_paths = sorted(
            glob.glob(os.path.join(input_dir, "*.root")) + glob.glob(os.path.join(input_dir, "*.parquet"))
        )[:n_files]
        print(f"\tFound {len(sample_input_paths)} input files for the {sample} sample.")
        for input_path in sample_input_paths:
            output_name = os.path.splitext(os.path.basename(input_path))[0] + ".parquet"
            input_paths.append(input_path)
            output_paths.append(os.path.join(sample_output_dir, output_name))
    return input_paths, output_paths


@hydra.main(config_path="../config", config_name="vertex_ntuplizer", version_base=None)
def main(cfg: DictConfig) -> None:
    print("<ntupelize_vertices>:")
    print("Working directory : {}".format(os.getcwd()))
    input_paths, output_paths = collect_paths(cfg)
    if cfg.use_multiprocessing:
        # One ntuplizer, and hence one set of builders, per worker process
        with multiprocessing.Pool(processes=cfg.n_processes) as pool:
            pool.starmap(process_single_file, zip(input_paths, output_paths, repeat(cfg)))
    else:
        for input_path, output_path in zip(input_paths, output_paths):
            process_single_file(input_path, output_path, cfg)


if __name__ == "__main__":
    main()
