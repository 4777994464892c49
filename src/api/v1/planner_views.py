"""API views for the call planner (week plans, generation, manual edits)."""
from __future__ import annotations

from dataclasses import asdict

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import (
    APIException,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from api.auth_views import SafeScopedRateThrottle
from api.v1.pagination import StandardResultsSetPagination
from api.v1.permissions import IsManagerCapable, IsPlannerUser
from api.v1.planner_serializers import (
    GenerateSerializer,
    MoveDaySerializer,
    PlanItemCreateSerializer,
    PlanItemSerializer,
    PlanItemUpdateSerializer,
    ReorderSerializer,
    SubmitSerializer,
)
from core.export import rows_to_csv_response
from planner import services
from planner.dates import current_quarter, parse_week
from planner.exceptions import (
    PlanConflict,
    PlanItemNotFound,
    PlannerError,
    TerritoryForbidden,
)
from planner.models import PlanItem



class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflit de planification."
    default_code = "conflict"


def _api_error(exc: PlannerError) -> APIException:
    """Translate a planner domain error into the matching DRF exception."""
    if isinstance(exc, PlanConflict):
        return Conflict(
            {
                "detail": exc.message,
                "conflicting_item_id": str(exc.conflicting_item_id) if exc.conflicting_item_id else None,
            }
        )
    if isinstance(exc, PlanItemNotFound):
        return NotFound(exc.message)
    if isinstance(exc, TerritoryForbidden):
        return PermissionDenied(exc.message)
    return ValidationError({"detail": exc.message})


def _int_param(request, name):
    value = request.query_params.get(name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError({name: "Doit etre un entier."})


def _resolve_rep(request, rep_id):
    try:
        return services.resolve_rep(request.user, rep_id)
    except PlannerError as exc:
        raise _api_error(exc)


class PlanItemViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """Plan items: listing plus manual add, update, delete and reorder."""

    serializer_class = PlanItemSerializer
    permission_classes = [IsAuthenticated, IsPlannerUser]
    pagination_class = StandardResultsSetPagination
    filterset_fields = ["planned_week", "day_of_week", "status"]
    ordering_fields = ["planned_week", "day_of_week", "position", "created_at"]
    ordering = ["planned_week", "day_of_week", "position"]

    def get_queryset(self):
        qs = PlanItem.objects.select_related("store")
        rep_id = self.request.query_params.get("rep_id")
        if services.is_manager(self.request.user) and not rep_id:
            return qs
        return qs.filter(rep=_resolve_rep(self.request, rep_id))

    def create(self, request, *args, **kwargs):
        serializer = PlanItemCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        rep = _resolve_rep(request, data.get("rep_id"))
        try:
            item = services.add_item(
                request.user,
                rep,
                store_id=data["store_id"],
                day_of_week=data["day_of_week"],
                week=data.get("planned_week"),
                notes=data.get("notes", ""),
            )
        except PlannerError as exc:
            raise _api_error(exc)
        return Response(PlanItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = PlanItemUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            item = services.update_item(request.user, pk, serializer.validated_data)
        except PlannerError as exc:
            raise _api_error(exc)
        return Response(PlanItemSerializer(item).data)

    def destroy(self, request, pk=None):
        try:
            services.delete_item(request.user, pk)
        except PlannerError as exc:
            raise _api_error(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def reorder(self, request, pk=None):
        """Move the item one slot up or down within its day."""
        serializer = ReorderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            item = services.reorder_item(request.user, pk, serializer.validated_data["direction"])
        except PlannerError as exc:
            raise _api_error(exc)
        return Response(PlanItemSerializer(item).data)


class PlannerViewSet(viewsets.ViewSet):
    """Week and quarter views, generation, day moves, submission and team rollup."""

    permission_classes = [IsAuthenticated, IsPlannerUser]
    throttle_scope = None

    @action(detail=False, methods=["get"])
    def week(self, request):
        rep = _resolve_rep(request, request.query_params.get("rep_id"))
        try:
            return Response(services.get_week(rep, request.query_params.get("week")))
        except PlannerError as exc:
            raise _api_error(exc)

    @action(detail=False, methods=["get"])
    def quarter(self, request):
        rep = _resolve_rep(request, request.query_params.get("rep_id"))
        quarter, year = current_quarter()
        requested_quarter = _int_param(request, "quarter")
        requested_year = _int_param(request, "year")
        if requested_quarter is not None:
            quarter = requested_quarter
        if requested_year is not None:
            year = requested_year
        try:
            return Response(services.get_quarter_summary(rep, quarter, year))
        except PlannerError as exc:
            raise _api_error(exc)

    @action(
        detail=False,
        methods=["post"],
        throttle_classes=[SafeScopedRateThrottle],
        throttle_scope="planner_generate",
    )
    def generate(self, request):
        """Regenerate suggestions for one week (default) or a whole quarter."""
        serializer = GenerateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        rep = _resolve_rep(request, data.get("rep_id"))
        try:
            if data["scope"] == "quarter":
                quarter, year = current_quarter()
                if data.get("quarter") is not None:
                    quarter, year = data["quarter"], data["year"]
                result = services.generate_quarter_plan(request.user, rep, quarter, year)
            else:
                result = services.generate_week_plan(request.user, rep, data.get("week"))
        except PlannerError as exc:
            raise _api_error(exc)
        payload = asdict(result)
        payload["scope"] = data["scope"]
        return Response(payload)

    @action(detail=False, methods=["get"])
    def stores(self, request):
        """Store search for manual additions."""
        rep = _resolve_rep(request, request.query_params.get("rep_id"))
        return Response(services.search_stores(rep, request.query_params.get("q", "")))

    @action(detail=False, methods=["post"], url_path="move-day")
    def move_day(self, request):
        serializer = MoveDaySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        rep = _resolve_rep(request, data.get("rep_id"))
        try:
            result = services.move_day(
                request.user,
                rep,
                from_week=data["from_week"],
                from_day=data["from_day"],
                to_week=data["to_week"],
                to_day=data["to_day"],
            )
        except PlannerError as exc:
            raise _api_error(exc)
        return Response(asdict(result))

    @action(detail=False, methods=["post"])
    def submit(self, request):
        serializer = SubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        rep = _resolve_rep(request, data.get("rep_id"))
        try:
            submission, created = services.submit_week(request.user, rep, data.get("week"))
        except PlannerError as exc:
            raise _api_error(exc)
        return Response(
            {
                "week": submission.week_start.isoformat(),
                "submitted": True,
                "submitted_at": submission.submitted_at,
                "created": created,
            }
        )

    @action(detail=False, methods=["get"], permission_classes=[IsAuthenticated, IsManagerCapable])
    def team(self, request):
        try:
            return Response(services.get_team_week(request.user, request.query_params.get("week")))
        except PlannerError as exc:
            raise _api_error(exc)

    @action(detail=False, methods=["get"], url_path="week-export")
    def week_export(self, request):
        """Download the rep's week plan as CSV."""
        rep = _resolve_rep(request, request.query_params.get("rep_id"))
        try:
            week = parse_week(request.query_params.get("week"))
        except PlannerError as exc:
            raise _api_error(exc)
        rows = services.week_export_rows(rep, week)
        return rows_to_csv_response(rows, services.EXPORT_COLUMNS, f"plan_{week.isoformat()}")
