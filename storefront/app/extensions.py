from flask_cors import CORS

from storefront.modules.cart.workflow import MutationGuard

# Singletons (initialized in app factory)
cors = CORS()
cart_guard = MutationGuard()
