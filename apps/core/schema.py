"""
Custom AutoSchema for automatic tag assignment
"""
from drf_spectacular.openapi import AutoSchema


class CustomAutoSchema(AutoSchema):
    """
    Custom schema that automatically assigns tags based on ViewSet and action
    """

    def get_tags(self):
        """Auto-assign tags based on ViewSet class and action"""
        tags = super().get_tags()

        view = self.view
        view_name = view.__class__.__name__
        action = getattr(view, 'action', None)

        tag_mapping = {
            'PropertyViewSet': self._get_property_tag(action),
            'BookingViewSet': self._get_booking_tag(action),
            'NotificationViewSet': ['Notifications'],
            'WishlistViewSet': ['Wishlists'],
            'ReviewViewSet': ['Reviews'],
            'PaymentViewSet': ['Payments'],
        }

        return tag_mapping.get(view_name, tags or ['api'])

    def _get_property_tag(self, action):
        """Get tag for property endpoints"""
        agent_actions = ['create', 'update', 'partial_update', 'destroy']
        if action in agent_actions:
            return ['Properties - Agent']
        return ['Properties - Public']

    def _get_booking_tag(self, action):
        """Get tag for booking endpoints"""
        public_actions = ['check_availability']
        agent_actions = [
            'confirm', 'reject', 'complete', 'confirm_payment',
            'agent_schedule', 'agent_schedule_for', 'stats_summary', 'stats_monthly',
        ]

        if action in public_actions:
            return ['Bookings - Public']
        elif action in agent_actions:
            return ['Bookings - Agent']
        return ['Bookings - User']
