"""
Ledgerman API URLs.

Include this in your project's urlpatterns:

    path('api/ledgerman/', include('ledgerman.api.urls')),
"""

from rest_framework.routers import DefaultRouter

from .views import CollectionViewSet, ObligationViewSet, ReconciliationViewSet

router = DefaultRouter()
router.register("obligations", ObligationViewSet)
router.register("collections", CollectionViewSet)
router.register("reconciliations", ReconciliationViewSet)

urlpatterns = router.urls
