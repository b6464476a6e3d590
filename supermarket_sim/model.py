from __future__ import annotations

# Store model: the concrete engine.
#
# Customers walk through five service points:
#   ENTRANCE -> SHOPPING -> REGULAR_CHECKOUT | EXPRESS_CHECKOUT | SELF_CHECKOUT
#
# Routing after shopping:
# - express customers, and anyone with at most `express_item_threshold` items,
#   go to the express lane
# - everyone else picks self checkout with probability SELF_CHECKOUT_SHARE,
#   the regular lane otherwise
#
# All randomness comes from one `random.Random` seeded from the config, so a
# fixed seed reproduces a run exactly.

import itertools
import logging
import random
from typing import assert_never

from .arrival import ArrivalProcess
from .config import SimulationConfig
from .customer import Customer, draw_customer_profile
from .engine import Engine
from .errors import InvariantViolation
from .events import Event, EventType, ServicePointType
from .notifier import Notifier
from .report import CustomerReport
from .service_point import ServicePoint

logger = logging.getLogger(__name__)

SELF_CHECKOUT_SHARE = 0.3


class StoreModel(Engine):
    def __init__(
        self,
        config: SimulationConfig,
        *,
        notifier: Notifier | None = None,
        report: CustomerReport | None = None,
        estimate_interval: float = 1.0,
    ) -> None:
        config.validate()
        super().__init__(
            simulation_time=config.simulation_time,
            delay_ms=config.delay_ms,
            notifier=notifier,
            estimate_interval=estimate_interval,
        )
        self.config = config
        self.report = report or CustomerReport()
        self.rng = random.Random(config.seed)

        self.arrival_process = ArrivalProcess(config.arrival().sampler(self.rng), self.event_list, self.clock)

        samplers = {
            ServicePointType.ENTRANCE: config.entrance().sampler(self.rng),
            ServicePointType.SHOPPING: config.service(config.shopping_multiplier).sampler(self.rng),
            ServicePointType.REGULAR_CHECKOUT: config.service(config.regular_multiplier).sampler(self.rng),
            ServicePointType.EXPRESS_CHECKOUT: config.service(config.express_multiplier).sampler(self.rng),
            ServicePointType.SELF_CHECKOUT: config.service(config.self_checkout_multiplier).sampler(self.rng),
        }
        self.points: dict[ServicePointType, ServicePoint] = {
            point_type: ServicePoint(
                point_type,
                sampler,
                self.event_list,
                self.clock,
                shopping_base_time=config.shopping_base_time,
                shopping_time_per_item=config.shopping_time_per_item,
            )
            for point_type, sampler in samplers.items()
        }
        self.service_points = list(self.points.values())

        # Customers currently inside the store, by id.
        self.customers: dict[int, Customer] = {}
        self._ids = itertools.count(1)

    # -------------------- engine hooks --------------------

    def on_reset(self) -> None:
        self.rng.seed(self.config.seed)
        self._ids = itertools.count(1)
        self.customers.clear()
        self.report.reset()

    def initialization(self) -> None:
        self.arrival_process.generate_next(immediate=True)

    def run_event(self, event: Event) -> None:
        match event.type:
            case EventType.ARRIVAL:
                self._arrive()
            case EventType.ENTRANCE_DONE:
                self._enter_shopping()
            case EventType.SHOPPING_DONE:
                self._go_to_checkout()
            case EventType.REGULAR_CHECKOUT_DONE:
                self._leave(ServicePointType.REGULAR_CHECKOUT)
            case EventType.EXPRESS_CHECKOUT_DONE:
                self._leave(ServicePointType.EXPRESS_CHECKOUT)
            case EventType.SELF_CHECKOUT_DONE:
                self._leave(ServicePointType.SELF_CHECKOUT)
            case _:
                assert_never(event.type)

    def results(self) -> None:
        final_time = self.clock.now()
        logger.info(
            "%d customers completed, mean time in store %.2f",
            self.report.completed,
            self.report.mean_time_in_store,
        )
        self.notifier.on_simulation_ended(final_time)

    # -------------------- event handlers --------------------

    def _arrive(self) -> None:
        cfg = self.config
        customer_type, items = draw_customer_profile(
            express_percentage=cfg.express_customer_percentage,
            regular_items=cfg.regular_items,
            express_items=cfg.express_items,
            rng=self.rng,
        )
        customer = Customer(next(self._ids), customer_type, items, self.clock.now())
        self.customers[customer.id] = customer
        self.points[ServicePointType.ENTRANCE].enqueue(customer)
        logger.debug("customer %d (%s, %d items) arrived", customer.id, customer_type.name, items)
        self.notifier.on_customer_created(customer.snapshot())
        self.arrival_process.generate_next()

    def _enter_shopping(self) -> None:
        customer = self.points[ServicePointType.ENTRANCE].dequeue()
        if customer is None:
            raise InvariantViolation("entrance finished service with an empty queue")
        self._move(customer, ServicePointType.SHOPPING)
        customer.start_shopping(self.clock.now())
        shopping = self.points[ServicePointType.SHOPPING]
        shopping.enqueue(customer)
        # Start right away if the shopping area is idle, instead of waiting for the C-phase.
        shopping.begin_service()

    def _go_to_checkout(self) -> None:
        customer = self.points[ServicePointType.SHOPPING].dequeue()
        if customer is None:
            logger.warning("t=%.3f shopping finished with nobody in the shopping area", self.clock.now())
            return
        now = self.clock.now()
        customer.end_shopping(now)

        lane = self.choose_checkout(customer)
        customer.start_checkout(now)
        self.points[lane].enqueue(customer)
        self._move(customer, lane)

    def _leave(self, lane: ServicePointType) -> None:
        if not lane.is_checkout:
            raise InvariantViolation(f"{lane.value} is not a checkout lane")
        customer = self.points[lane].dequeue()
        if customer is None:
            raise InvariantViolation(f"{lane.value} finished service with an empty queue")
        customer.mark_removed(self.clock.now())
        self.notifier.on_customer_completed(customer.id, lane)
        self.report.record(customer, lane)
        del self.customers[customer.id]

    # -------------------- routing --------------------

    def choose_checkout(self, customer: Customer) -> ServicePointType:
        if customer.is_express or customer.items <= self.config.express_item_threshold:
            return ServicePointType.EXPRESS_CHECKOUT
        if self.rng.random() < SELF_CHECKOUT_SHARE:
            return ServicePointType.SELF_CHECKOUT
        return ServicePointType.REGULAR_CHECKOUT

    def _move(self, customer: Customer, to_stage: ServicePointType) -> None:
        from_stage = customer.current_location
        customer.move_to(to_stage)
        if from_stage is not None:
            self.notifier.on_customer_moved(customer.id, from_stage, to_stage)
