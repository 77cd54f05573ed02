import logging
import numpy as np
import matplotlib.pyplot as plt
import pandas as pd
from dataclasses import dataclass, field
from typing import List, Optional
from pathlib import Path
from datetime import datetime

from pool_model.src.adapters.memory import (
    InMemoryNativeCustody,
    InMemoryShareToken,
    InMemoryToken,
    StaticPriceFeed,
)
from pool_model.src.adapters.price_oracle import ExchangeRateOracle
from pool_model.src.constants import SCALE, YEAR_IN_SECONDS
from pool_model.src.errors import ProtocolError
from pool_model.src.pool import LendingPool
from pool_model.src.state.pool_config import PoolConfig

logger = logging.getLogger(__name__)

TOKEN = 10**18  # one whole underlying or collateral token
FEED_DECIMALS = 8

@dataclass
class RateParams:
    base_apr: float = 0.02        # borrow rate at zero utilization
    multiplier_apr: float = 0.20  # added at full utilization
    reserve_factor: float = 0.10

    def to_config(self, controller: str = "controller") -> PoolConfig:
        return PoolConfig(
            controller=controller,
            base_rate_per_second=int(self.base_apr * SCALE) // YEAR_IN_SECONDS,
            multiplier_per_second=int(self.multiplier_apr * SCALE) // YEAR_IN_SECONDS,
            reserve_factor=int(self.reserve_factor * SCALE),
        )

@dataclass
class SimulationParams:
    simulation_days: int = 365
    steps_per_day: int = 4
    initial_supply: int = 1_000_000   # whole underlying tokens
    borrowers: int = 5
    collateral_per_borrower: int = 200  # whole collateral tokens
    collateral_price: float = 2000.0
    price_volatility: float = 0.01      # per step
    borrow_intensity: float = 0.3       # probability a borrower draws in a step
    repay_intensity: float = 0.2        # probability a borrower repays in a step
    random_seed: Optional[int] = None
    experiment_name: str = "default"
    rate_params: RateParams = field(default_factory=RateParams)

@dataclass
class RateModelConfig:
    """A named rate parameter set to compare"""
    name: str
    params: RateParams

    def __str__(self):
        p = self.params
        return f"{self.name} (base={p.base_apr:.3f}, mult={p.multiplier_apr:.3f}, rf={p.reserve_factor:.2f})"

class PoolSimulation:
    def __init__(self, params: SimulationParams):
        self.params = params
        self.rng = np.random.default_rng(params.random_seed)
        self.now = 0
        self.step_seconds = 24 * 60 * 60 // params.steps_per_day
        self.rejected = 0

        self.underlying = InMemoryToken("USDX")
        self.native = InMemoryNativeCustody()
        self.shares = InMemoryShareToken()
        self.collateral_feed = StaticPriceFeed(self._feed_price(params.collateral_price), FEED_DECIMALS)
        self.underlying_feed = StaticPriceFeed(10**FEED_DECIMALS, FEED_DECIMALS)
        self.pool = LendingPool(
            config=params.rate_params.to_config(),
            oracle=ExchangeRateOracle(self.collateral_feed, self.underlying_feed),
            underlying=self.underlying,
            collateral_custody=self.native,
            shares=self.shares,
            clock=lambda: self.now,
        )
        self.borrower_names = [f"borrower_{i}" for i in range(params.borrowers)]

    @staticmethod
    def _feed_price(price: float) -> int:
        return max(int(price * 10**FEED_DECIMALS), 1)

    def _setup(self):
        self.underlying.mint("lender", self.params.initial_supply * TOKEN)
        self.pool.supply("lender", self.params.initial_supply * TOKEN)
        for name in self.borrower_names:
            # spare underlying so interest can be repaid
            self.underlying.mint(name, self.params.initial_supply * TOKEN // 100)
            self.native.fund(name, self.params.collateral_per_borrower * TOKEN)
            self.pool.add_collateral(name, self.params.collateral_per_borrower * TOKEN)

    def _act(self, borrower: str):
        roll = self.rng.random()
        try:
            if roll < self.params.borrow_intensity:
                excess = self.pool.account_liquidity(borrower).excess
                available = self.pool.cash() - self.pool.ledger.total_reserve
                # underlying priced at $1, so USD headroom converts 1:1
                amount = min(int(excess * self.rng.uniform(0.1, 0.9)), available)
                if amount > 0:
                    self.pool.borrow(borrower, amount)
            elif roll < self.params.borrow_intensity + self.params.repay_intensity:
                owed = self.pool.borrow_balance(borrower)
                amount = min(int(owed * self.rng.uniform(0.2, 1.0)), self.underlying.balance_of(borrower))
                if amount > 0:
                    self.pool.repay(borrower, amount)
        except ProtocolError as e:
            self.rejected += 1
            logger.debug("Rejected action for %s: %s", borrower, e)

    def simulate(self) -> pd.DataFrame:
        self._setup()
        price = self.params.collateral_price
        total_steps = self.params.simulation_days * self.params.steps_per_day
        rows = []

        for step in range(total_steps):
            self.now += self.step_seconds

            # Collateral price follows geometric Brownian motion
            price *= np.exp(self.rng.normal(0, self.params.price_volatility))
            self.collateral_feed.set_price(self._feed_price(price))

            for borrower in self.borrower_names:
                self._act(borrower)
            self.pool.accrue_interest()

            ledger = self.pool.ledger
            rows.append({
                "day": step / self.params.steps_per_day,
                "collateral_price": price,
                "utilization": self.pool.utilization() / SCALE,
                "borrow_apr": self.pool.borrow_rate_per_second() * YEAR_IN_SECONDS / SCALE,
                "supply_apr": self.pool.supply_rate_per_second() * YEAR_IN_SECONDS / SCALE,
                "lend_rate": self.pool.lend_exchange_rate() / SCALE,
                "debt_rate": self.pool.debt_exchange_rate() / SCALE,
                "total_debt": ledger.total_debt / TOKEN,
                "total_reserve": ledger.total_reserve / TOKEN,
            })

        self.pool.verify_invariants()
        return pd.DataFrame(rows)

    def plot_results(self, results: pd.DataFrame):
        output_dir = Path('research/results') / self.params.experiment_name
        output_dir.mkdir(parents=True, exist_ok=True)

        fig, (ax1, ax2, ax3) = plt.subplots(3, 1, figsize=(12, 10))

        # Plot utilization
        ax1.plot(results["day"], results["utilization"] * 100, label='Utilization')
        ax1.set_ylabel('Utilization (%)')
        ax1.set_title('Pool Utilization Over Time')
        ax1.legend()
        ax1.grid(True)

        # Plot rates
        ax2.plot(results["day"], results["borrow_apr"] * 100, label='Borrow APR', color='orange')
        ax2.plot(results["day"], results["supply_apr"] * 100, label='Supply APR', color='green')
        ax2.set_ylabel('Rate (%)')
        ax2.set_title('Interest Rates Over Time')
        ax2.legend()
        ax2.grid(True)

        # Plot exchange rates
        ax3.plot(results["day"], results["lend_rate"], label='Lend exchange rate')
        ax3.plot(results["day"], results["debt_rate"], label='Debt exchange rate')
        ax3.set_ylabel('Underlying per unit')
        ax3.set_xlabel('Time (days)')
        ax3.legend()
        ax3.grid(True)

        plt.tight_layout()

        rp = self.params.rate_params
        plot_name = f"base_{rp.base_apr}_mult_{rp.multiplier_apr}_rf_{rp.reserve_factor}"
        if self.params.random_seed is not None:
            plot_name += f"_seed_{self.params.random_seed}"

        plt.savefig(output_dir / f"{plot_name}.png")
        plt.close()

def compare_rate_models(rate_models: List[RateModelConfig], base_params: SimulationParams) -> pd.DataFrame:
    """Run the same market with each rate model and plot them together"""
    output_dir = Path('research/results/rate_model_comparison')
    output_dir.mkdir(parents=True, exist_ok=True)

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 10))
    summaries = []

    for model_config in rate_models:
        params = SimulationParams(
            simulation_days=base_params.simulation_days,
            steps_per_day=base_params.steps_per_day,
            initial_supply=base_params.initial_supply,
            borrowers=base_params.borrowers,
            collateral_per_borrower=base_params.collateral_per_borrower,
            collateral_price=base_params.collateral_price,
            price_volatility=base_params.price_volatility,
            borrow_intensity=base_params.borrow_intensity,
            repay_intensity=base_params.repay_intensity,
            random_seed=base_params.random_seed,
            experiment_name=base_params.experiment_name,
            rate_params=model_config.params
        )

        sim = PoolSimulation(params)
        results = sim.simulate()

        ax1.plot(results["day"], results["utilization"] * 100, label=str(model_config))
        ax2.plot(results["day"], results["borrow_apr"] * 100, label=str(model_config))

        final = results.iloc[-1]
        summaries.append({
            "model": str(model_config),
            "mean_utilization": results["utilization"].mean(),
            "final_lend_rate": final["lend_rate"],
            "final_debt_rate": final["debt_rate"],
            "final_reserve": final["total_reserve"],
            "rejected_actions": sim.rejected,
        })

    # Configure plots
    ax1.set_ylabel('Utilization (%)')
    ax1.set_title('Pool Utilization Over Time')
    ax1.legend(loc='upper left')
    ax1.grid(True, alpha=0.3)  # Lighter grid

    ax2.set_ylabel('Borrow APR (%)')
    ax2.set_xlabel('Time (days)')
    ax2.set_title('Borrow Rate Over Time')
    ax2.legend(bbox_to_anchor=(1.05, 1), loc='upper left')
    ax2.grid(True, alpha=0.3)

    seed_text = f"Random Seed: {base_params.random_seed}" if base_params.random_seed is not None else "No Seed"
    fig.text(0.02, 0.02, seed_text, fontsize=8, alpha=0.7)

    plt.tight_layout()

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename = f"rate_comparison_{timestamp}.png"

    plt.savefig(output_dir / filename, bbox_inches='tight', dpi=300)
    plt.close()

    return pd.DataFrame(summaries)

def main():
    rate_models = [
        RateModelConfig(
            name="Flat",
            params=RateParams(base_apr=0.05, multiplier_apr=0.0, reserve_factor=0.10)
        ),
        RateModelConfig(
            name="Default",
            params=RateParams()
        ),
        RateModelConfig(
            name="Steep",
            params=RateParams(base_apr=0.01, multiplier_apr=0.50, reserve_factor=0.20)
        ),
    ]

    base_params = SimulationParams(
        experiment_name="rate_model_comparison",
        random_seed=57,
        simulation_days=100
    )

    baseline = PoolSimulation(SimulationParams(experiment_name="baseline", random_seed=57, simulation_days=100))
    baseline.plot_results(baseline.simulate())

    summary = compare_rate_models(rate_models, base_params)
    print(summary.to_string(index=False))

if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    main()
