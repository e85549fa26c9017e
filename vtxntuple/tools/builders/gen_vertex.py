"""Builds generator-level secondary decay vertices from the production positions of the generator particles.

Particles are grouped into vertices by their production position, using union-find over all pairs of particles
whose production positions are within the configured tolerance of each other. The grouping does not depend on
the order of the input particles; vertices are emitted in the order of their first daughter in the input.
"""
import json
import numba
import numpy as np
from dataclasses import dataclass
from omegaconf import OmegaConf
from vtxntuple.tools import general as g


DEFAULT_VERTEX_TOLERANCE = 1.0e-4
DEFAULT_MIN_PRIMARY_SEPARATION = 1.0e-2


class MissingPrimaryVertex(RuntimeError):
    """Raised when the event has no primary vertex to measure the decay vertices against"""


@dataclass(frozen=True)
class GenVertex:
    position: tuple
    daughters: tuple
    mothers: tuple
    pdgIds: tuple
    sim_match: bool = False
    no_nu: bool = False

    @property
    def n_daughters(self):
        return len(self.daughters)

    def distance(self, point):
        return g.distance3d(self.position, point)

    def print(self):
        print(
            "genVertex: position = (%1.4f, %1.4f, %1.4f), #daughters = %i, pdgIds = %s, mothers = %s, "
            "simMatch = %s, noNu = %s"
            % (
                self.position[0],
                self.position[1],
                self.position[2],
                self.n_daughters,
                list(self.pdgIds),
                list(self.mothers),
                self.sim_match,
                self.no_nu,
            )
        )


@numba.njit
def find_root(parents, idx):
    root = idx
    while parents[root] != root:
        root = parents[root]
    while parents[idx] != root:
        next_idx = parents[idx]
        parents[idx] = root
        idx = next_idx
    return root


@numba.njit
def cluster_positions(positions, tolerance):
    """ Groups points that are connected by a chain of pairwise distances not exceeding the tolerance.

    Args:
        positions : np.array
            Array of shape (N, 3) with the positions to be clustered
        tolerance : float
            Maximum distance between two points for them to be linked

    Returns:
        labels : np.array
            Cluster label of each point. Labels are numbered in the order of the first point of each cluster.
    """
    num_points = positions.shape[0]
    parents = np.arange(num_points)
    tolerance2 = tolerance * tolerance
    for i in range(num_points):
        for j in range(i + 1, num_points):
            dist2 = 0.0
            for k in range(3):
                diff = positions[i, k] - positions[j, k]
                dist2 += diff * diff
            if dist2 <= tolerance2:
                root_i = find_root(parents, i)
                root_j = find_root(parents, j)
                # The root of each cluster is always its member with the smallest index
                if root_i < root_j:
                    parents[root_j] = root_i
                elif root_j < root_i:
                    parents[root_i] = root_j
    labels = np.full(num_points, -1, dtype=np.int64)
    num_clusters = 0
    for i in range(num_points):
        root = find_root(parents, i)
        if labels[root] == -1:
            labels[root] = num_clusters
            num_clusters += 1
        labels[i] = labels[root]
    return labels


class GenVertexCollectionBuilder:
    def __init__(self, cfg, verbosity=0):
        self.cfg = OmegaConf.create(cfg)
        OmegaConf.set_readonly(self.cfg, True)
        self.verbosity = verbosity
        self.vertexTolerance = float(g.getParameter(self.cfg, "vertexTolerance", DEFAULT_VERTEX_TOLERANCE))
        self.minPrimarySeparation = float(
            g.getParameter(self.cfg, "minPrimarySeparation", DEFAULT_MIN_PRIMARY_SEPARATION)
        )
        if self.vertexTolerance < 0.0:
            raise ValueError("Invalid configuration parameter 'vertexTolerance' = %g !!" % self.vertexTolerance)
        if self.minPrimarySeparation < 0.0:
            raise ValueError(
                "Invalid configuration parameter 'minPrimarySeparation' = %g !!" % self.minPrimarySeparation
            )
        if verbosity >= 1:
            print("<GenVertexCollectionBuilder::GenVertexCollectionBuilder>:")
            print(" vertexTolerance = %g" % self.vertexTolerance)
            print(" minPrimarySeparation = %g" % self.minPrimarySeparation)

        self.genVertices = []
        self.genVerticesSimMatch = []
        self.genVerticesNoNu = []
        self.genVerticesNoNuSimMatch = []
        self.numMalformed = 0

    def print_config(self):
        primitive_cfg = OmegaConf.to_container(self.cfg)
        print(json.dumps(primitive_cfg, indent=4))

    def genVertexCollection(self):
        return self.genVertices

    def genVertexSimMatchCollection(self):
        return self.genVerticesSimMatch

    def genVertexNoNuCollection(self):
        return self.genVerticesNoNu

    def genVertexNoNuSimMatchCollection(self):
        return self.genVerticesNoNuSimMatch

    def clear(self):
        self.genVertices = []
        self.genVerticesSimMatch = []
        self.genVerticesNoNu = []
        self.genVerticesNoNuSimMatch = []
        self.numMalformed = 0

    def clusterGenParticles(self, genParticles):
        """Returns the lists of generator-particle indices sharing a production position, in the order of their
        first member. Particles without a production position are skipped."""
        indices = []
        positions = []
        for idx, genParticle in enumerate(genParticles):
            if genParticle.vertex is None:
                self.numMalformed += 1
                if self.verbosity >= 2:
                    print("Skipping generator particle without production vertex:")
                    genParticle.print()
                continue
            indices.append(idx)
            positions.append(genParticle.vertex)
        if len(positions) == 0:
            return []
        labels = cluster_positions(np.array(positions, dtype=np.float64), self.vertexTolerance)
        clusters = [[] for _ in range(labels.max() + 1)]
        for idx, label in zip(indices, labels):
            clusters[label].append(idx)
        return clusters

    def isSimMatched(self, position, simPositions):
        if len(simPositions) == 0:
            return False
        distances = np.linalg.norm(simPositions - np.asarray(position), axis=1)
        return bool(np.any(distances <= self.vertexTolerance))

    def makeVertex(self, daughters, genParticles, position, sim_match):
        mothers = set()
        for idx in daughters:
            mothers.update(genParticles[idx].mothers)
        pdgIds = tuple(genParticles[idx].pdgId for idx in daughters)
        return GenVertex(
            position=position,
            daughters=tuple(daughters),
            mothers=tuple(sorted(mothers)),
            pdgIds=pdgIds,
            sim_match=sim_match,
            no_nu=not any(g.is_neutrino(pdgId) for pdgId in pdgIds),
        )

    def buildVertexPairs(self, genParticles, simTracks, primaryPosition):
        """Single clustering pass. Returns (vertex, no-neutrino vertex or None) for every decay vertex."""
        simPositions = np.array(
            [simTrack.vertex for simTrack in simTracks if simTrack.vertex is not None], dtype=np.float64
        ).reshape(-1, 3)
        vertexPairs = []
        for daughters in self.clusterGenParticles(genParticles):
            if len(daughters) < 2:
                continue
            memberPositions = np.array([genParticles[idx].vertex for idx in daughters])
            mean = memberPositions.mean(axis=0)
            if np.any(np.linalg.norm(memberPositions - mean, axis=1) > self.vertexTolerance):
                if self.verbosity >= 2:
                    print("Dropping cluster of %i particles that is wider than the tolerance" % len(daughters))
                continue
            if g.distance3d(mean, primaryPosition) <= self.minPrimarySeparation:
                continue
            position = tuple(float(x) for x in mean)
            sim_match = self.isSimMatched(position, simPositions)
            vertex = self.makeVertex(daughters, genParticles, position, sim_match)
            noNuDaughters = [idx for idx in daughters if not g.is_neutrino(genParticles[idx].pdgId)]
            noNuVertex = None
            if len(noNuDaughters) >= 2:
                noNuVertex = self.makeVertex(noNuDaughters, genParticles, position, sim_match)
            vertexPairs.append((vertex, noNuVertex))
        return vertexPairs

    def build(self, genParticles, simTracks, primaryVertices):
        self.clear()
        if len(primaryVertices) == 0:
            raise MissingPrimaryVertex("Primary vertex collection is empty")
        primaryVertex = primaryVertices[0]

        vertexPairs = self.buildVertexPairs(genParticles, simTracks, primaryVertex.position)
        self.genVertices = [vertex for vertex, _ in vertexPairs]
        self.genVerticesSimMatch = [vertex for vertex in self.genVertices if vertex.sim_match]
        self.genVerticesNoNu = [noNuVertex for _, noNuVertex in vertexPairs if noNuVertex is not None]
        self.genVerticesNoNuSimMatch = [vertex for vertex in self.genVerticesNoNu if vertex.sim_match]
        if self.verbosity >= 2:
            print(
                "Built %i gen vertices (%i sim-matched), %i without neutrinos (%i sim-matched)"
                % (
                    len(self.genVertices),
                    len(self.genVerticesSimMatch),
                    len(self.genVerticesNoNu),
                    len(self.genVerticesNoNuSimMatch),
                )
            )
            for vertex in self.genVertices:
                vertex.print()
        return (
            self.genVertices,
            self.genVerticesSimMatch,
            self.genVerticesNoNu,
            self.genVerticesNoNuSimMatch,
        )
