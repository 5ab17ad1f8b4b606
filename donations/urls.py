from django.urls import path
from . import views

urlpatterns = [
    # Inventory
    path('inventory/', views.InventoryListView.as_view(), name='inventory-list'),
    path('inventory/add-units/', views.InventoryAddUnitsView.as_view(), name='inventory-add-units'),
    path('inventory/alerts/', views.InventoryAlertsView.as_view(), name='inventory-alerts'),
    path('inventory/transactions/', views.InventoryTransactionListView.as_view(), name='inventory-transactions'),
    path('inventory/<str:blood_type>/', views.InventoryUpdateView.as_view(), name='inventory-update'),

    # Donations
    path('blood/donate/', views.DonationCreateView.as_view(), name='donation-create'),
    path('blood/my-donations/', views.MyDonationsView.as_view(), name='donation-mine'),
    path('blood/all/', views.DonationListView.as_view(), name='donation-list'),
    path('blood/<int:pk>/', views.DonationDetailView.as_view(), name='donation-detail'),
    path('blood/<int:pk>/status/', views.DonationStatusView.as_view(), name='donation-status'),

    # Blood Requests
    path('requests/', views.BloodRequestCreateView.as_view(), name='request-create'),
    path('requests/my-requests/', views.MyRequestsView.as_view(), name='request-mine'),
    path('requests/all/', views.BloodRequestListView.as_view(), name='request-list'),
    path('requests/<int:pk>/', views.BloodRequestDetailView.as_view(), name='request-detail'),
    path('requests/<int:pk>/status/', views.BloodRequestStatusView.as_view(), name='request-status'),
]
