"""The session's ordered workout collection; sole writer of the stored snapshot."""

from dataclasses import dataclass, field

from mapty.models import Workout, create_workout
from mapty.reconcile.restore import ReconciliationError, reconcile
from mapty.snapshot import serialize_workout


class WorkoutNotFound(LookupError):
    def __init__(self, workout_id):
        super().__init__(f"Workout {workout_id} not found")
        self.workout_id = workout_id


@dataclass
class LoadResult:
    workouts: list[Workout] = field(default_factory=list)
    failures: list[tuple[object, ReconciliationError]] = field(default_factory=list)

    @property
    def loaded(self) -> int:
        return len(self.workouts)

    @property
    def skipped(self) -> int:
        return len(self.failures)


class WorkoutLog:
    """Ordered workouts (insertion order is display order) plus their store.

    Every mutating operation rewrites the whole snapshot.
    """

    def __init__(self, store, verbose: bool = False):
        self.store = store
        self.verbose = verbose
        self._workouts: list[Workout] = []

    @property
    def workouts(self) -> list[Workout]:
        return list(self._workouts)

    def __len__(self):
        return len(self._workouts)

    def create(self, workout_type: str, coords, distance, duration, extra) -> Workout:
        """Validate, construct, append and persist a new workout.

        Raises ValidationError without touching the collection or the store.
        """
        workout = create_workout(workout_type, coords, distance, duration, extra)
        self._workouts.append(workout)
        self._persist()
        if self.verbose:
            print(f"  ADD {workout.id} {workout.description}")
        return workout

    def load(self) -> LoadResult:
        """Replace the collection with whatever the store holds."""
        return self.load_from_snapshot(self.store.read())

    def load_from_snapshot(self, records) -> LoadResult:
        """Reconcile raw records into the collection, skipping bad ones."""
        result = LoadResult()
        seen_ids = set()

        for record in records:
            try:
                workout = reconcile(record)
                if workout.id in seen_ids:
                    raise ReconciliationError("duplicate id", workout.id)
            except ReconciliationError as e:
                result.failures.append((record, e))
                if self.verbose:
                    print(f"  SKIP {e}")
                continue
            seen_ids.add(workout.id)
            result.workouts.append(workout)

        self._workouts = list(result.workouts)
        if self.verbose:
            print(f"Loaded {result.loaded} workout(s), skipped {result.skipped}.")
        return result

    def find_by_id(self, workout_id: str) -> Workout | None:
        for workout in self._workouts:
            if workout.id == workout_id:
                return workout
        return None

    def select(self, workout_id: str) -> tuple[Workout, tuple[float, float]]:
        """Register a user selection of a workout.

        Bumps its click count and moves it to the end of the collection
        (most recently touched last), then persists.

        Returns:
            (updated workout, coords to center the map on)
        """
        current = self.find_by_id(workout_id)
        if current is None:
            raise WorkoutNotFound(workout_id)

        updated = reconcile(current).click()
        self._workouts = [w for w in self._workouts if w.id != workout_id]
        self._workouts.append(updated)
        self._persist()

        if self.verbose:
            print(f"  SELECT {updated.id} clicks={updated.clicks}")
        return updated, updated.coords

    def snapshot(self) -> list[dict]:
        return [serialize_workout(w) for w in self._workouts]

    def reset(self):
        """Drop every workout, in memory and in the store. Irreversible."""
        self._workouts = []
        self.store.erase()

    def _persist(self):
        self.store.write(self._workouts)
