"""Fixtures shared by the tests of the vertex and jet builders."""

import numpy as np
import pytest
import vector
import awkward as ak
from omegaconf import OmegaConf

from vtxntuple.tools.data_management.objects import GenParticle, SimTrack, Vertex, Jet, GenJet, GenJetFlavourInfo


@pytest.fixture(name="gen_vertex_cfg")
def fixture_gen_vertex_cfg():
    return OmegaConf.create({"vertexTolerance": 1.0e-4, "minPrimarySeparation": 1.0e-2})


@pytest.fixture(name="reco_jet_cfg")
def fixture_reco_jet_cfg():
    return OmegaConf.create({"absEtaMax": 2.4, "jetPtMin": 20.0, "jetPtMax": 200.0, "drCut": 0.4})


@pytest.fixture(name="make_gen_particle")
def fixture_make_gen_particle():
    """Builds a generator particle produced at the given position."""

    def make(barcode, pdgId, position, mothers=(), status=1):
        p4 = vector.obj(px=1.0, py=0.5, pz=2.0, E=10.0)
        vertex = None if position is None else np.array(position, dtype=np.float64)
        return GenParticle(p4, pdgId, status, vertex, mothers=mothers, barcode=barcode)

    return make


@pytest.fixture(name="make_sim_track")
def fixture_make_sim_track():
    def make(barcode, position, pdgId=211, q=1.0):
        p4 = vector.obj(px=1.0, py=1.0, pz=1.0, E=5.0)
        vertex = None if position is None else np.array(position, dtype=np.float64)
        return SimTrack(p4, pdgId, q, vertex, barcode=barcode)

    return make


@pytest.fixture(name="origin")
def fixture_origin():
    return [Vertex(np.zeros(3), barcode=0)]


@pytest.fixture(name="make_jet")
def fixture_make_jet():
    def make(barcode, pt, eta, phi=0.0, mass=5.0):
        return Jet(vector.obj(pt=pt, eta=eta, phi=phi, mass=mass), barcode=barcode)

    return make


@pytest.fixture(name="make_flavour_info")
def fixture_make_flavour_info():
    def make(barcode, eta, phi=0.0, hadronFlavour=5, partonFlavour=5, pt=45.0):
        genJet = None
        if eta is not None:
            genJet = GenJet(vector.obj(pt=pt, eta=eta, phi=phi, mass=5.0), barcode=barcode)
        return GenJetFlavourInfo(genJet, hadronFlavour, partonFlavour, barcode=barcode)

    return make


@pytest.fixture(name="event_dict")
def fixture_event_dict():
    """One event with a B-like decay at (1, 1, 1) into two pions and a neutrino, a sim track from that decay,
    a primary vertex at the origin, and a single jet matched to a b-flavoured generator jet."""
    return {
        "gen_particle_pdg": [2212, 521, 211, -211, 14],
        "gen_particle_status": [4, 2, 1, 1, 1],
        "gen_particle_px": [0.1, 5.0, 2.0, 2.0, 1.0],
        "gen_particle_py": [0.1, 5.0, 2.0, 2.0, 1.0],
        "gen_particle_pz": [6500.0, 5.0, 2.0, 2.0, 1.0],
        "gen_particle_energy": [6501.0, 10.0, 3.5, 3.5, 1.8],
        "gen_particle_vx": [0.0, 0.0, 1.0, 1.0, 1.0],
        "gen_particle_vy": [0.0, 0.0, 1.0, 1.0, 1.0],
        "gen_particle_vz": [0.0, 0.0, 1.0, 1.0, 1.0],
        "gen_particle_mothers": [[], [0], [1], [1], [1]],
        "gen_particle_daughters": [[1], [2, 3, 4], [], [], []],
        "sim_track_pdg": [211],
        "sim_track_charge": [1.0],
        "sim_track_px": [2.0],
        "sim_track_py": [2.0],
        "sim_track_pz": [2.0],
        "sim_track_energy": [3.5],
        "sim_track_vx": [1.0],
        "sim_track_vy": [1.0],
        "sim_track_vz": [1.00005],
        "primary_vertex_x": [0.0],
        "primary_vertex_y": [0.0],
        "primary_vertex_z": [0.0],
        "reco_jet_pt": [50.0, 10.0],
        "reco_jet_eta": [0.0, 1.0],
        "reco_jet_phi": [0.0, 1.0],
        "reco_jet_mass": [5.0, 2.0],
        "gen_jet_pt": [48.0],
        "gen_jet_eta": [0.05],
        "gen_jet_phi": [0.0],
        "gen_jet_mass": [5.0],
        "gen_jet_hadron_flavour": [5],
        "gen_jet_parton_flavour": [-5],
    }


@pytest.fixture(name="event")
def fixture_event(event_dict):
    return ak.Record(event_dict)
