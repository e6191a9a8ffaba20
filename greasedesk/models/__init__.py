from greasedesk.models.group import Group
from greasedesk.models.site import Site
from greasedesk.models.user import User
from greasedesk.models.group_billing import GroupBilling
from greasedesk.models.tax_rate import TaxRate
from greasedesk.models.service_catalogue import ServiceCatalogue
from greasedesk.models.verification_token import VerificationToken
from greasedesk.models.invite import Invite
from greasedesk.models.booking import Booking
from greasedesk.models.job_card import JobCard
