import vector
import awkward as ak
from particle import pdgid
from vtxntuple.tools import general as g


class hepParticleBase:
    def __init__(self, p4, barcode=-1):
        self.p4 = p4
        self.updatePtEtaPhiMass()
        self.barcode = barcode

    def updatePtEtaPhiMass(self):
        self.energy = self.p4.energy
        self.p = self.p4.p
        self.pt = self.p4.pt
        self.eta = self.p4.eta
        self.phi = self.p4.phi
        self.mass = self.p4.mass


def format_position(position):
    if position is None:
        return "undefined"
    return "(%1.4f, %1.4f, %1.4f)" % (position[0], position[1], position[2])


class GenParticle(hepParticleBase):
    """Generator-level particle. Mothers and daughters are stored as indices into the event's particle list.
    The builders never modify a particle once it has been read, but the attributes are not write-protected."""
    def __init__(self, p4, pdgId, status, vertex, decay_vertex=None, mothers=(), daughters=(), barcode=-1):
        super().__init__(p4=p4, barcode=barcode)
        self.pdgId = pdgId
        self.abs_pdgId = abs(pdgId)
        self.status = status
        self.charge = get_charge(pdgId)
        self.vertex = vertex
        self.decay_vertex = decay_vertex
        self.mothers = tuple(mothers)
        self.daughters = tuple(daughters)

    @property
    def is_final_state(self):
        return self.status == 1

    def print(self):
        print(
            "genParticle #%i: pdgId = %i, status = %i, pT = %1.2f, eta = %1.3f, phi = %1.3f, vertex = %s, "
            "#mothers = %i, #daughters = %i"
            % (
                self.barcode,
                self.pdgId,
                self.status,
                self.pt,
                self.eta,
                self.phi,
                format_position(self.vertex),
                len(self.mothers),
                len(self.daughters),
            )
        )


class SimTrack(hepParticleBase):
    def __init__(self, p4, pdgId, q, vertex, barcode=-1):
        super().__init__(p4=p4, barcode=barcode)
        self.pdgId = pdgId
        self.q = q
        self.vertex = vertex

    def print(self):
        print(
            "simTrack #%i: pdgId = %i, charge = %1.1f, pT = %1.2f, vertex = %s"
            % (self.barcode, self.pdgId, self.q, self.pt, format_position(self.vertex))
        )


class Vertex:
    def __init__(self, position, barcode=-1):
        self.position = position
        self.barcode = barcode

    def print(self):
        print("vertex #%i: position = %s" % (self.barcode, format_position(self.position)))


class GenJet(hepParticleBase):
    def print(self):
        print(
            "genJet #%i: pT = %1.1f, eta = %1.3f, phi = %1.3f, mass = %1.2f"
            % (self.barcode, self.pt, self.eta, self.phi, self.mass)
        )


class GenJetFlavourInfo:
    """Flavour information of a generator jet. genJet is None if the entry has no generator jet attached."""
    def __init__(self, genJet, hadronFlavour, partonFlavour, barcode=-1):
        self.genJet = genJet
        self.hadronFlavour = hadronFlavour
        self.partonFlavour = partonFlavour
        self.barcode = barcode

    @property
    def is_valid(self):
        return self.genJet is not None


class Jet(hepParticleBase):
    def print(self):
        print(
            "jet #%i: energy = %1.1f, pT = %1.1f, eta = %1.3f, phi = %1.3f, mass = %1.2f"
            % (self.barcode, self.energy, self.pt, self.eta, self.phi, self.mass)
        )


def get_charge(pdg_id):
    """Charge of the particle according to the PDG table, or None for codes unknown to it"""
    return pdgid.charge(pdg_id)


def check_lengths(columns, what):
    lengths = set(len(column) for column in columns)
    if len(lengths) > 1:
        raise ValueError("Length of arrays for %s don't match !!" % what)


def get_column(event, name, required=True):
    if name in event.fields:
        return ak.to_list(event[name])
    if required:
        raise ValueError("Input event has no column [%s]" % name)
    return None


def buildGenParticles(
    pdgIds, statuses, pxs, pys, pzs, energies, vxs, vys, vzs, dvxs=None, dvys=None, dvzs=None, mothers=None,
    daughters=None
):
    num_particles = len(pdgIds)
    if dvxs is None:
        dvxs = dvys = dvzs = [None] * num_particles
    if mothers is None:
        mothers = [[] for _ in range(num_particles)]
    if daughters is None:
        daughters = [[] for _ in range(num_particles)]
    check_lengths(
        [pdgIds, statuses, pxs, pys, pzs, energies, vxs, vys, vzs, dvxs, dvys, dvzs, mothers, daughters],
        "generator particles"
    )
    genParticles = []
    for idx in range(num_particles):
        p4 = vector.obj(px=pxs[idx], py=pys[idx], pz=pzs[idx], E=energies[idx])
        for relative in list(mothers[idx]) + list(daughters[idx]):
            if relative < 0 or relative >= num_particles:
                raise ValueError(
                    "Generator particle #%i refers to particle #%i, which is outside the event" % (idx, relative)
                )
        genParticle = GenParticle(
            p4,
            pdgIds[idx],
            statuses[idx],
            g.to_position(vxs[idx], vys[idx], vzs[idx]),
            decay_vertex=g.to_position(dvxs[idx], dvys[idx], dvzs[idx]),
            mothers=mothers[idx],
            daughters=daughters[idx],
            barcode=idx,
        )
        genParticles.append(genParticle)
    return genParticles


def readGenParticles(event):
    return buildGenParticles(
        get_column(event, "gen_particle_pdg"),
        get_column(event, "gen_particle_status"),
        get_column(event, "gen_particle_px"),
        get_column(event, "gen_particle_py"),
        get_column(event, "gen_particle_pz"),
        get_column(event, "gen_particle_energy"),
        get_column(event, "gen_particle_vx"),
        get_column(event, "gen_particle_vy"),
        get_column(event, "gen_particle_vz"),
        dvxs=get_column(event, "gen_particle_dvx", required=False),
        dvys=get_column(event, "gen_particle_dvy", required=False),
        dvzs=get_column(event, "gen_particle_dvz", required=False),
        mothers=get_column(event, "gen_particle_mothers"),
        daughters=get_column(event, "gen_particle_daughters"),
    )


def readSimTracks(event):
    pdgIds = get_column(event, "sim_track_pdg")
    charges = get_column(event, "sim_track_charge")
    pxs = get_column(event, "sim_track_px")
    pys = get_column(event, "sim_track_py")
    pzs = get_column(event, "sim_track_pz")
    energies = get_column(event, "sim_track_energy")
    vxs = get_column(event, "sim_track_vx")
    vys = get_column(event, "sim_track_vy")
    vzs = get_column(event, "sim_track_vz")
    check_lengths([pdgIds, charges, pxs, pys, pzs, energies, vxs, vys, vzs], "simulated tracks")
    simTracks = []
    for idx in range(len(pdgIds)):
        p4 = vector.obj(px=pxs[idx], py=pys[idx], pz=pzs[idx], E=energies[idx])
        vertex = g.to_position(vxs[idx], vys[idx], vzs[idx])
        simTracks.append(SimTrack(p4, pdgIds[idx], charges[idx], vertex, barcode=idx))
    return simTracks


def readPrimaryVertices(event):
    xs = get_column(event, "primary_vertex_x")
    ys = get_column(event, "primary_vertex_y")
    zs = get_column(event, "primary_vertex_z")
    check_lengths([xs, ys, zs], "primary vertices")
    vertices = []
    for idx in range(len(xs)):
        position = g.to_position(xs[idx], ys[idx], zs[idx])
        if position is None:
            raise ValueError("Primary vertex #%i has no valid position" % idx)
        vertices.append(Vertex(position, barcode=idx))
    return vertices


def readJets(event):
    pts = get_column(event, "reco_jet_pt")
    etas = get_column(event, "reco_jet_eta")
    phis = get_column(event, "reco_jet_phi")
    masses = get_column(event, "reco_jet_mass")
    check_lengths([pts, etas, phis, masses], "reconstructed jets")
    jets = []
    for idx in range(len(pts)):
        p4 = vector.obj(pt=pts[idx], eta=etas[idx], phi=phis[idx], mass=masses[idx])
        jets.append(Jet(p4, barcode=idx))
    return jets


def readGenJetsFlavourInfo(event):
    pts = get_column(event, "gen_jet_pt")
    etas = get_column(event, "gen_jet_eta")
    phis = get_column(event, "gen_jet_phi")
    masses = get_column(event, "gen_jet_mass")
    hadronFlavours = get_column(event, "gen_jet_hadron_flavour")
    partonFlavours = get_column(event, "gen_jet_parton_flavour")
    check_lengths([pts, etas, phis, masses, hadronFlavours, partonFlavours], "generator jets flavour info")
    flavourInfos = []
    for idx in range(len(pts)):
        genJet = None
        if None not in (pts[idx], etas[idx], phis[idx], masses[idx]):
            p4 = vector.obj(pt=pts[idx], eta=etas[idx], phi=phis[idx], mass=masses[idx])
            genJet = GenJet(p4, barcode=idx)
        flavourInfos.append(GenJetFlavourInfo(genJet, hadronFlavours[idx], partonFlavours[idx], barcode=idx))
    return flavourInfos
