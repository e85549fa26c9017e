import json
import numpy as np
from omegaconf import OmegaConf
from vtxntuple.tools import general as g
from vtxntuple.tools.data_management.objects import hepParticleBase


class RecoJet(hepParticleBase):
    def __init__(self, p4, barcode=-1, genJet=None, genJetIndex=-1, hadronFlavour=None, partonFlavour=None,
                 dR=None):
        super().__init__(p4=p4, barcode=barcode)
        self.genJet = genJet
        self.genJetIndex = genJetIndex
        self.hadronFlavour = hadronFlavour
        self.partonFlavour = partonFlavour
        self.dR = dR

    @property
    def is_gen_matched(self):
        return self.genJet is not None

    def print(self):
        output = "recoJet #%i: pT = %1.1f, eta = %1.3f, phi = %1.3f, mass = %1.2f" % (
            self.barcode,
            self.pt,
            self.eta,
            self.phi,
            self.mass,
        )
        if self.is_gen_matched:
            output += ", genJet #%i (dR = %1.3f): hadronFlavour = %i, partonFlavour = %i" % (
                self.genJetIndex,
                self.dR,
                self.hadronFlavour,
                self.partonFlavour,
            )
        print(output)


class RecoJetCollectionBuilder:
    def __init__(self, cfg, verbosity=0):
        self.cfg = OmegaConf.create(cfg)
        OmegaConf.set_readonly(self.cfg, True)
        self.verbosity = verbosity
        self.absEtaMax = float(self.cfg.absEtaMax)
        self.jetPtMin = float(self.cfg.jetPtMin)
        self.jetPtMax = float(self.cfg.jetPtMax)
        self.drCut = float(self.cfg.drCut)
        if self.absEtaMax < 0.0:
            raise ValueError("Invalid configuration parameter 'absEtaMax' = %g !!" % self.absEtaMax)
        if self.jetPtMin > self.jetPtMax:
            raise ValueError(
                "Invalid configuration parameters 'jetPtMin' = %g > 'jetPtMax' = %g !!" % (self.jetPtMin, self.jetPtMax)
            )
        if self.drCut < 0.0:
            raise ValueError("Invalid configuration parameter 'drCut' = %g !!" % self.drCut)
        if verbosity >= 1:
            print("<RecoJetCollectionBuilder::RecoJetCollectionBuilder>:")
            print(" absEtaMax = %1.2f" % self.absEtaMax)
            print(" jetPtMin = %1.2f" % self.jetPtMin)
            print(" jetPtMax = %1.2f" % self.jetPtMax)
            print(" drCut = %1.2f" % self.drCut)

        self.recoJets = []
        self.recoJetsGenMatch = []

    def print_config(self):
        primitive_cfg = OmegaConf.to_container(self.cfg)
        print(json.dumps(primitive_cfg, indent=4))

    def recoJetCollection(self):
        return self.recoJets

    def recoJetGenMatchCollection(self):
        return self.recoJetsGenMatch

    def goodJet(self, jet):
        return abs(jet.eta) <= self.absEtaMax and self.jetPtMin <= jet.pt <= self.jetPtMax

    def findGenMatch(self, jet, genEtas, genPhis):
        """Returns the index of the closest generator jet and the distance to it, or (-1, None) if there is no
        generator jet within drCut. Ties are resolved in favour of the first generator jet."""
        if len(genEtas) == 0:
            return -1, None
        drs = g.deltaR_to_all(float(jet.eta), float(jet.phi), genEtas, genPhis)
        idx = int(np.argmin(drs))
        if drs[idx] <= self.drCut:
            return idx, float(drs[idx])
        return -1, None

    def build(self, jets, genJetsFlavourInfo):
        self.recoJets = []
        self.recoJetsGenMatch = []

        # Entries without a generator jet get NaN coordinates and are never matched
        genEtas = np.array(
            [info.genJet.eta if info.is_valid else np.nan for info in genJetsFlavourInfo], dtype=np.float64
        )
        genPhis = np.array(
            [info.genJet.phi if info.is_valid else np.nan for info in genJetsFlavourInfo], dtype=np.float64
        )
        for jet in jets:
            if not self.goodJet(jet):
                continue
            self.recoJets.append(RecoJet(jet.p4, barcode=jet.barcode))
            genIdx, dR = self.findGenMatch(jet, genEtas, genPhis)
            if genIdx < 0:
                continue
            info = genJetsFlavourInfo[genIdx]
            recoJetGenMatch = RecoJet(
                jet.p4,
                barcode=jet.barcode,
                genJet=info.genJet,
                genJetIndex=genIdx,
                hadronFlavour=info.hadronFlavour,
                partonFlavour=info.partonFlavour,
                dR=dR,
            )
            self.recoJetsGenMatch.append(recoJetGenMatch)
        if self.verbosity >= 2:
            print("Selected %i jets, %i of them gen-matched" % (len(self.recoJets), len(self.recoJetsGenMatch)))
            for recoJet in self.recoJetsGenMatch:
                recoJet.print()
        return self.recoJets, self.recoJetsGenMatch
