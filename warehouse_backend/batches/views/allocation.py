"""
======================================================
PATH: batches/views/allocation.py
======================================================
ALLOCATION VIEWSET

Order-fulfillment boundary:
1) POST plan/         -> FIFO plan (200 even when can_fulfill is false)
2) POST manual-plan/  -> worker-picked plan (same line shape)
3) POST commit/       -> apply lines atomically
                         409 + replan=true when the plan went stale
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from batches.serializers import (
    AllocationRequestSerializer,
    CommitSerializer,
    ManualPlanSerializer,
)
from batches.services import (
    AllocationConflictError,
    BatchNotFoundError,
    BatchStoreError,
    allocate,
    build_manual_plan,
    commit_allocation,
)
from permissions.roles import CAP_INVENTORY_ALLOCATE, HasCapability

from .responses import (
    conflict_response,
    not_found_response,
    store_error_response,
    validation_error_response,
)


class AllocationViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_ALLOCATE

    @extend_schema(tags=["allocations"], request=AllocationRequestSerializer, responses={200: dict})
    @action(detail=False, methods=["post"], url_path="plan")
    def plan(self, request):
        s = AllocationRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        try:
            result = allocate(v["product_id"], v["quantity"])
        except ValidationError as exc:
            return validation_error_response(exc)
        except BatchStoreError as exc:
            return store_error_response(exc)

        return Response(result.to_dict(), status=status.HTTP_200_OK)

    @extend_schema(tags=["allocations"], request=ManualPlanSerializer, responses={200: dict})
    @action(detail=False, methods=["post"], url_path="manual-plan")
    def manual_plan(self, request):
        s = ManualPlanSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data

        try:
            result = build_manual_plan(v["product_id"], v["quantity"], v["selections"])
        except ValidationError as exc:
            return validation_error_response(exc)
        except BatchNotFoundError as exc:
            return not_found_response(exc)
        except BatchStoreError as exc:
            return store_error_response(exc)

        return Response(result.to_dict(), status=status.HTTP_200_OK)

    @extend_schema(tags=["allocations"], request=CommitSerializer, responses={200: dict, 409: dict})
    @action(detail=False, methods=["post"], url_path="commit")
    def commit(self, request):
        s = CommitSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            results = commit_allocation(s.validated_data["lines"])
        except ValidationError as exc:
            return validation_error_response(exc)
        except BatchNotFoundError as exc:
            return not_found_response(exc)
        except AllocationConflictError as exc:
            return conflict_response(exc)
        except BatchStoreError as exc:
            return store_error_response(exc)

        return Response(
            {"updates": [r.to_dict() for r in results]},
            status=status.HTTP_200_OK,
        )
