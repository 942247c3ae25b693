"""ProjectRepository — load/save of projects, floor plans, transforms and images.

The repository is the only component that touches storage.  It is built
from a :class:`StructuredStore` (project index, FloorPlans, transforms) and
a :class:`BlobStore` (images) and injected into the editor session.

The two tiers are not updated atomically.  The project index keeps its own
``nodeCount`` next to the FloorPlan; :meth:`ProjectRepository.reconcile`
repairs the index from the FloorPlan when the two disagree.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pydantic import ValidationError

from floormap.config import PROJECTS_KEY, floor_data_key, transform_key
from floormap.models.floorplan import FloorPlan, Project, UnitMode, ViewportTransform
from floormap.storage.blobs import BlobStore
from floormap.storage.structured import StructuredStore

logger = logging.getLogger(__name__)


class ProjectRepository:
    """Persistence adapter keyed by project id."""

    def __init__(self, structured: StructuredStore, blobs: BlobStore) -> None:
        self.structured = structured
        self.blobs = blobs

    # -- Project index ---------------------------------------------------------

    def _load_index(self) -> list[Project]:
        data = self.structured.get_json(PROJECTS_KEY, [])
        if not isinstance(data, list):
            logger.warning("Project index is not a list; starting empty")
            return []
        projects: list[Project] = []
        for entry in data:
            try:
                projects.append(Project.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping invalid project index entry: %r", entry)
        return projects

    def _save_index(self, projects: list[Project]) -> None:
        self.structured.set_json(
            PROJECTS_KEY,
            [p.model_dump(mode="json", by_alias=True) for p in projects],
        )

    def list_projects(self) -> list[Project]:
        return self._load_index()

    def get_project(self, project_id: str) -> Project | None:
        for project in self._load_index():
            if project.id == project_id:
                return project
        return None

    def create_project(self, name: str) -> Project:
        """Append a new, empty project to the index."""
        name = name.strip()
        if not name:
            raise ValueError("Project name must not be empty")
        project = Project(name=name)
        projects = self._load_index()
        projects.append(project)
        self._save_index(projects)
        logger.info("Created project %s (%s)", project.id, name)
        return project

    def rename_project(self, project_id: str, name: str) -> Project | None:
        name = name.strip()
        if not name:
            raise ValueError("Project name must not be empty")
        projects = self._load_index()
        for project in projects:
            if project.id == project_id:
                project.name = name
                project.updated_at = datetime.now(timezone.utc)
                self._save_index(projects)
                return project
        return None

    async def delete_project(self, project_id: str) -> bool:
        """Remove a project and cascade to its FloorPlan, transform and image.

        Returns True if the project was in the index.  Irreversible.
        """
        projects = self._load_index()
        remaining = [p for p in projects if p.id != project_id]
        found = len(remaining) != len(projects)
        if found:
            self._save_index(remaining)
        await self.clear_project_data(project_id)
        logger.info("Deleted project %s", project_id)
        return found

    # -- FloorPlan -------------------------------------------------------------

    def load_floor_plan(
        self,
        project_id: str,
        unit_mode: UnitMode = UnitMode.PERCENTAGE,
    ) -> FloorPlan:
        """Persisted FloorPlan, or a fresh default if missing or invalid."""
        data = self.structured.get_json(floor_data_key(project_id))
        if data is None:
            return FloorPlan.default(project_id, unit_mode)
        try:
            plan = FloorPlan.model_validate(data)
        except ValidationError:
            logger.warning(
                "Invalid floor plan stored for project %s; using defaults",
                project_id,
                exc_info=True,
            )
            return FloorPlan.default(project_id, unit_mode)
        if plan.project_id != project_id:
            plan.project_id = project_id
        return plan

    def save_floor_plan(self, plan: FloorPlan) -> None:
        """Write the FloorPlan through and refresh the index node count."""
        self.structured.set_json(floor_data_key(plan.project_id), plan.to_storage())
        self._refresh_node_count(plan.project_id, len(plan.nodes))

    def _refresh_node_count(self, project_id: str, node_count: int) -> bool:
        projects = self._load_index()
        for project in projects:
            if project.id == project_id:
                if project.node_count == node_count:
                    return False
                project.node_count = node_count
                project.updated_at = datetime.now(timezone.utc)
                self._save_index(projects)
                return True
        return False

    def reconcile(self, project_id: str, plan: FloorPlan | None = None) -> bool:
        """Align the index ``nodeCount`` with the stored FloorPlan.

        Returns True if the index entry was repaired.
        """
        plan = plan or self.load_floor_plan(project_id)
        repaired = self._refresh_node_count(project_id, len(plan.nodes))
        if repaired:
            logger.warning(
                "Project %s index node count was out of date; set to %d",
                project_id,
                len(plan.nodes),
            )
        return repaired

    # -- Viewport transform ----------------------------------------------------

    def load_transform(self, project_id: str) -> ViewportTransform:
        data = self.structured.get_json(transform_key(project_id))
        if data is None:
            return ViewportTransform()
        try:
            return ViewportTransform.model_validate(data)
        except ValidationError:
            logger.warning("Invalid transform stored for project %s; resetting", project_id)
            return ViewportTransform()

    def save_transform(self, project_id: str, transform: ViewportTransform) -> None:
        self.structured.set_json(
            transform_key(project_id),
            transform.model_dump(mode="json", by_alias=True),
        )

    # -- Images ----------------------------------------------------------------

    async def save_image(self, project_id: str, data: bytes | str) -> bool:
        return await self.blobs.put(project_id, data)

    async def load_image(self, project_id: str) -> bytes | None:
        return await self.blobs.get(project_id)

    async def delete_image(self, project_id: str) -> bool:
        return await self.blobs.delete(project_id)

    # -- Destructive -----------------------------------------------------------

    async def clear_project_data(self, project_id: str) -> None:
        """Remove the FloorPlan, transform and image of a project."""
        self.structured.delete(floor_data_key(project_id))
        self.structured.delete(transform_key(project_id))
        await self.delete_image(project_id)
        logger.info("Cleared data for project %s", project_id)
