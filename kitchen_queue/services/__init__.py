"""
                        Services Module

Collaborators and engine of the kitchen order queue. Collaborators follow
the factory pattern: each has an abstract base, a development
implementation and a production implementation, selected by ENV_MODE.

Services:
    - order_store: in-memory / SQL order records
    - clock: system / fixed clock
    - localization: display text catalogues
    - queue: wait estimator, board filter, auto-advance scheduler, timers
"""
