import json
import numba
import numpy as np
import awkward as ak


NEUTRINO_PDGIDS = [12, 14, 16]


@numba.njit
def deltaPhi(phi1, phi2):
    """ Calculates the difference in azimuthal angle of two objects, wrapped to [-pi, pi].

    Args:
        phi1 : float
            The phi coordinate of the first object.
        phi2 : float
            The phi coordinate of the second object.

    Returns:
        dPhi : float
            The (signed) difference in azimuthal angle
    """
    diff = phi1 - phi2
    return np.arctan2(np.sin(diff), np.cos(diff))


@numba.njit
def deltaR_etaPhi(eta1, phi1, eta2, phi2):
    """ Calculates the angular distance between two objects in the eta-phi coordinates.

    Args:
        eta1 : float
            The eta coordinate of the first object.
        phi1 : float
            The phi coordinate of the first object.
        eta2 : float
            The eta coordinate of the second object.
        phi2 : float
            The phi coordinate of the second object.

    Returns:
        dR : float
            The angular distance between the two objects
    """
    deta = np.abs(eta1 - eta2)
    dphi = deltaPhi(phi1, phi2)
    return np.sqrt(deta**2 + dphi**2)


@numba.njit
def deltaR_to_all(eta, phi, etas, phis):
    """ Angular distance of one object to an array of objects. Entries with NaN eta are treated as missing and
    get an infinite distance."""
    drs = np.full(len(etas), np.inf, dtype=np.float64)
    for i in range(len(etas)):
        if np.isnan(etas[i]):
            continue
        drs[i] = deltaR_etaPhi(eta, phi, etas[i], phis[i])
    return drs


def distance3d(point1, point2):
    """ Euclidean distance between two points in space"""
    return float(np.linalg.norm(np.asarray(point1, dtype=np.float64) - np.asarray(point2, dtype=np.float64)))


def is_neutrino(pdg_id):
    return abs(pdg_id) in NEUTRINO_PDGIDS


def to_position(x, y, z):
    """ Builds a position array from its coordinates. Returns None if any of the coordinates is missing or not
    finite, as happens for particles without a recorded vertex."""
    if x is None or y is None or z is None:
        return None
    position = np.array([x, y, z], dtype=np.float64)
    if not np.all(np.isfinite(position)):
        return None
    return position


def getParameter(cfg, name, default_value):
    value = None
    if name in cfg.keys():
        value = cfg[name]
    else:
        value = default_value
    return value


def load_parquet(input_path: str, columns: list = None) -> ak.Array:
    """ Loads the contents of the .parquet file specified by the input_path

    Args:
        input_path : str
            The path to the .parquet file to be loaded.
        columns : list
            Names of the columns/branches to be loaded from the .parquet file

    Returns:
        input_data : ak.Array
            The data from the .parquet file
    """
    ret = ak.from_parquet(input_path, columns=columns)
    ret = ak.Array({k: ret[k] for k in ret.fields})
    return ret


class NpEncoder(json.JSONEncoder):
    """ Class for encoding various objects such that they could be saved to a json file"""
    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        return super(NpEncoder, self).default(obj)


def save_to_json(data, output_path):
    """ Saves data to a .json file located at `output_path`

    Args:
        data : dict
            The data to be saved
        output_path : str
            Destination of the .json file

    Returns:
        None
    """
    with open(output_path, "wt") as out_file:
        json.dump(data, out_file, indent=4, cls=NpEncoder)
