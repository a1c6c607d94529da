# Import all models here so Alembic and create_all can detect them
from alnet.db.session import Base

from alnet.modules.user_management.models.user import User
from alnet.modules.profiles.models.profile import Profile
from alnet.modules.connections.models.connection import Connection
from alnet.modules.messages.models.message import Message
from alnet.modules.notifications.models.notification import Notification
from alnet.modules.jobs.models.job import Job, JobApplication
from alnet.modules.startups.models.startup import Startup
from alnet.modules.donations.models.donation import Donation
from alnet.modules.analytics.models.analytics_event import AnalyticsEvent
from alnet.modules.events.models.event import Event, EventRsvp
from alnet.modules.audit.models.audit_log import AuditLog
from alnet.modules.announcements.models.announcement import Announcement
