"""
Per-vehicle track progress: distance covered, travel direction and kill conditions.
"""
from dataclasses import dataclass

import numpy as np

from . import constants
from .track import Track


@dataclass
class AgentProgressState:
    current_segment: int = 0
    best_segment: int = 0
    current_distance: float = 0.0
    best_distance: float = 0.0
    travel_direction: int = 0  # -1, 0 or +1 relative to the segment direction
    alive: bool = True
    birth_time: float = 0.0

    def reset(self, now):
        self.current_segment = 0
        self.best_segment = 0
        self.current_distance = 0.0
        self.best_distance = 0.0
        self.travel_direction = 0
        self.alive = True
        self.birth_time = now

    def kill(self):
        self.alive = False


class TrackProgressTracker:
    """
    Projects vehicle positions onto the track to measure how far they got.

    The kill predicates only report; the caller decides when to kill.
    """

    def __init__(self, track: Track, stall_timeout=constants.STALL_TIMEOUT,
                 min_progress_segment=constants.MIN_PROGRESS_SEGMENT,
                 velocity_epsilon=constants.VELOCITY_EPSILON):
        self.track = track
        self.stall_timeout = stall_timeout
        self.min_progress_segment = min_progress_segment
        self.velocity_epsilon = velocity_epsilon

    def update(self, state: AgentProgressState, position, velocity) -> bool:
        """Update state from the vehicle's position and velocity. False if no segment matched."""
        match = self.track.project(position)
        if match is None:
            return False
        segment, _, track_distance = match

        velocity = np.asarray(velocity, dtype=np.float64)
        if velocity.dot(velocity) < self.velocity_epsilon:
            state.travel_direction = 0
        else:
            along = velocity.dot(self.track.deltas[segment])
            # perpendicular motion keeps the previous direction
            if along > 0.0:
                state.travel_direction = 1
            elif along < 0.0:
                state.travel_direction = -1

        state.best_segment = max(state.best_segment, segment)
        state.best_distance = max(state.best_distance, track_distance)
        state.current_segment = segment
        state.current_distance = track_distance
        return True

    def is_wrong_way(self, state: AgentProgressState) -> bool:
        return state.current_segment < 0

    def is_stalled(self, state: AgentProgressState, now) -> bool:
        return (now - state.birth_time) > self.stall_timeout and state.current_segment < self.min_progress_segment

    def should_kill(self, state: AgentProgressState, now) -> bool:
        return self.is_wrong_way(state) or self.is_stalled(state, now)
