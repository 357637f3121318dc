# pyWWCP Module - Projection
# -*- coding: utf-8 -*-
"""
 JSON projections of the domain graph

 entity      - one entity under a DirectiveSet, cycle safe
 collection  - ordered, paginated lists with their pre-pagination count
 history     - bounded status histories of one or many entities
"""
from pywwcp.projection.collection import ProjectionResult, project_collection
from pywwcp.projection.entity import project
from pywwcp.projection.history import project_history, project_history_collection

__all__ = ["project", "ProjectionResult", "project_collection",
           "project_history", "project_history_collection"]
