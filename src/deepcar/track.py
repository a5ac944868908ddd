"""
Closed track polyline with precomputed arclength table.
"""
import numpy as np

from .errors import ConfigurationError

SEGMENT_EPSILON = 1e-9


class Track:
    """
    Ordered, closed sequence of 3D waypoints.

    Segment i runs from waypoint i to waypoint (i + 1) % n. The cumulative
    distance table gives the arclength at the start of every segment, with
    dist[0] == 0. Arrays are read-only once built.
    """

    def __init__(self, waypoints, cumulative_distances=None):
        waypoints = np.array(waypoints, dtype=np.float64)
        if waypoints.ndim != 2 or waypoints.shape[1] != 3:
            raise ConfigurationError(f"waypoints must have shape (n, 3), got {waypoints.shape}")
        if len(waypoints) < 2:
            raise ConfigurationError(f"track needs at least two waypoints, got {len(waypoints)}")

        if cumulative_distances is None:
            cumulative_distances = self.arclength(waypoints)
        cumulative_distances = np.array(cumulative_distances, dtype=np.float64)
        if cumulative_distances.shape != (len(waypoints),):
            raise ConfigurationError(
                f"expected {len(waypoints)} cumulative distances, got {cumulative_distances.shape}")

        self.waypoints = waypoints
        self.cumulative_distances = cumulative_distances

        self.deltas = np.roll(waypoints, -1, axis=0) - waypoints
        self.lengths = np.linalg.norm(self.deltas, axis=1)
        self.directions = np.zeros_like(self.deltas)
        valid = self.lengths > SEGMENT_EPSILON
        self.directions[valid] = self.deltas[valid] / self.lengths[valid, None]

        for array in (self.waypoints, self.cumulative_distances, self.deltas, self.lengths, self.directions):
            array.flags.writeable = False

    @staticmethod
    def arclength(waypoints):
        """Running distance along the waypoints, starting at 0."""
        steps = np.linalg.norm(np.diff(waypoints, axis=0), axis=1)
        return np.concatenate(([0.0], np.cumsum(steps)))

    @property
    def num_segments(self):
        return len(self.waypoints)

    @property
    def total_length(self):
        """Arclength including the closing segment."""
        return float(self.cumulative_distances[-1] + self.lengths[-1])

    def project(self, position):
        """
        Nearest segment whose projection of position falls within the segment.

        Returns (segment, along, track_distance) or None when the position
        projects onto no segment.
        """
        position = np.asarray(position, dtype=np.float64)
        along = np.einsum("ij,ij->i", position - self.waypoints, self.directions)
        inside = (self.lengths > SEGMENT_EPSILON) & (along >= 0.0) & (along <= self.lengths)
        if not inside.any():
            return None

        projections = self.waypoints + self.directions * along[:, None]
        offsets = np.linalg.norm(projections - position, axis=1)
        offsets[~inside] = np.inf
        segment = int(np.argmin(offsets))
        return segment, float(along[segment]), float(self.cumulative_distances[segment] + along[segment])

    def __repr__(self):
        return f"Track(segments={self.num_segments}, length={self.total_length:.1f})"
