"""Runs the generator-vertex and reconstructed-jet builders event by event and collects the per-event summary
counts together with the flattened properties of the built objects into an awkward array.
"""
import tqdm
import awkward as ak
from omegaconf import OmegaConf
from vtxntuple.tools.data_management import objects as o
from vtxntuple.tools.builders.gen_vertex import GenVertexCollectionBuilder, MissingPrimaryVertex
from vtxntuple.tools.builders.reco_jet import RecoJetCollectionBuilder


def get_gen_vertex_info(genVertices):
    return {
        "gen_vertex_x": [vertex.position[0] for vertex in genVertices],
        "gen_vertex_y": [vertex.position[1] for vertex in genVertices],
        "gen_vertex_z": [vertex.position[2] for vertex in genVertices],
        "gen_vertex_n_daughters": [vertex.n_daughters for vertex in genVertices],
        "gen_vertex_sim_match": [vertex.sim_match for vertex in genVertices],
        "gen_vertex_no_nu": [vertex.no_nu for vertex in genVertices],
    }


def get_reco_jet_info(recoJets):
    return {
        "reco_jet_pt": [jet.pt for jet in recoJets],
        "reco_jet_eta": [jet.eta for jet in recoJets],
        "reco_jet_phi": [jet.phi for jet in recoJets],
        "reco_jet_gen_dR": [jet.dR for jet in recoJets],
        "reco_jet_hadron_flavour": [jet.hadronFlavour for jet in recoJets],
        "reco_jet_parton_flavour": [jet.partonFlavour for jet in recoJets],
    }


class VertexNtuplizer:
    def __init__(self, cfg, verbosity=0):
        self.cfg = OmegaConf.create(cfg)
        self.verbosity = verbosity
        self.genVertexBuilder = GenVertexCollectionBuilder(self.cfg.genVertices, verbosity)
        self.recoJetBuilder = RecoJetCollectionBuilder(self.cfg.recoJets, verbosity)

    def print_config(self):
        print("genVertices:")
        self.genVertexBuilder.print_config()
        print("recoJets:")
        self.recoJetBuilder.print_config()

    def analyze(self, event):
        genParticles = o.readGenParticles(event)
        simTracks = o.readSimTracks(event)
        primaryVertices = o.readPrimaryVertices(event)
        jets = o.readJets(event)
        genJetsFlavourInfo = o.readGenJetsFlavourInfo(event)
        if self.verbosity >= 3:
            print("primaryVertices:")
            for vertex in primaryVertices:
                vertex.print()
            print("simTracks:")
            for simTrack in simTracks:
                simTrack.print()
            print("jets:")
            for jet in jets:
                jet.print()
            print("genJets:")
            for info in genJetsFlavourInfo:
                if info.is_valid:
                    info.genJet.print()

        has_primary_vertex = True
        try:
            genVertices, genVerticesSimMatch, genVerticesNoNu, genVerticesNoNuSimMatch = self.genVertexBuilder.build(
                genParticles, simTracks, primaryVertices
            )
        except MissingPrimaryVertex as err:
            if self.verbosity >= 1:
                print("Skipping gen vertices of the event: %s" % err)
            has_primary_vertex = False
            genVertices, genVerticesSimMatch, genVerticesNoNu, genVerticesNoNuSimMatch = [], [], [], []
        recoJets, recoJetsGenMatch = self.recoJetBuilder.build(jets, genJetsFlavourInfo)

        info = {
            "has_primary_vertex": has_primary_vertex,
            "nGV": len(genVertices),
            "nGVs": len(genVerticesSimMatch),
            "nGVn": len(genVerticesNoNu),
            "nGVns": len(genVerticesNoNuSimMatch),
            "nRecoJets": len(recoJets),
            "nRecoJetsGenMatch": len(recoJetsGenMatch),
        }
        info.update(get_gen_vertex_info(genVertices))
        info.update(get_reco_jet_info(recoJetsGenMatch))
        return info

    def process(self, events):
        infos = []
        for event in tqdm.tqdm(events, total=len(events), disable=self.verbosity < 1):
            infos.append(self.analyze(event))
        return ak.Array(infos)
