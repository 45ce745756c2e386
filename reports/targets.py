from flask import current_app


class MonthlyTargetPolicy:
    """Monthly sales target used by the financial-year chart.

    Seasonal months get a fixed multiple of the base target; any other
    month expects growth over the previous month's actual revenue, or the
    base target when the previous month had no sales.
    """

    def __init__(self, base=8000.0, multipliers=None, growth=1.1):
        self.base = float(base)
        self.multipliers = dict(multipliers if multipliers is not None else {11: 1.3, 12: 1.5})
        self.growth = float(growth)

    @classmethod
    def from_config(cls, config=None):
        config = config or current_app.config
        return cls(
            base=config.get("MONTHLY_TARGET_BASE", 8000.0),
            multipliers=config.get("MONTHLY_TARGET_MULTIPLIERS"),
            growth=config.get("MONTHLY_TARGET_GROWTH", 1.1),
        )

    def target(self, month, previous_month_sales=0.0):
        if month in self.multipliers:
            return round(self.base * self.multipliers[month], 2)
        if previous_month_sales and previous_month_sales > 0:
            return round(previous_month_sales * self.growth, 2)
        return self.base


class DailyTargetPolicy:
    def __init__(self, base=1000.0, weekend_multiplier=1.2):
        self.base = float(base)
        self.weekend_multiplier = float(weekend_multiplier)

    @classmethod
    def from_config(cls, config=None):
        config = config or current_app.config
        return cls(
            base=config.get("DAILY_TARGET_BASE", 1000.0),
            weekend_multiplier=config.get("DAILY_TARGET_WEEKEND", 1.2),
        )

    def target(self, day):
        # Saturday and Sunday
        if day.weekday() >= 5:
            return round(self.base * self.weekend_multiplier, 2)
        return self.base
