"""URL patterns for the marketplace API."""
from django.urls import path
from . import views

app_name = "marketplace"

urlpatterns = [
    path("open/", views.OpenRequestsView.as_view(), name="open"),
    path("my/", views.MyRequestsView.as_view(), name="my"),
    path("incoming/", views.IncomingRequestsView.as_view(), name="incoming"),
    path("approvals/", views.ApprovalQueueView.as_view(), name="approvals"),
    path("dashboard/", views.DashboardView.as_view(), name="dashboard"),
    path("swappable/", views.SwappableShiftsView.as_view(), name="swappable"),
    path("requests/", views.CreateRequestView.as_view(), name="create"),
    path("requests/<int:request_id>/", views.RequestDetailView.as_view(), name="detail"),
    path("requests/<int:request_id>/accept/", views.AcceptRequestView.as_view(), name="accept"),
    path("requests/<int:request_id>/respond/", views.RespondToProposalView.as_view(), name="respond"),
    path(
        "requests/<int:request_id>/admin-decision/",
        views.AdminDecisionView.as_view(),
        name="admin_decision",
    ),
]
