from daybook.client.gateway import RemoteStoreGateway
from daybook.client.models import Credentials, EntityKind, ResponseData
from daybook.client.mutations import Mutation, MutationEngine, MutationState
from daybook.client.reorder import DragPhase, Rect, SectionReorderEngine, TaskReorderEngine
from daybook.client.session import AuthState, SessionClient
from daybook.client.store import DerivedView, EntityCollection, Store
from daybook.client.sync import SyncClient
