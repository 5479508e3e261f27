from app.market.schemas import IndicatorBundle, MomentumSummary

SYSTEM_PROMPT = (
    "You are an expert financial analyst. Analyze technical indicators and market "
    "sentiment to provide actionable insights. Always respond with valid JSON only."
)

_ANALYSIS_PROMPT = """Comprehensive analysis for {ticker}:

PRICE DATA:
- Current: ${price:.2f}
- 1D Change: {day1}
- 7D Change: {day7}
- 30D Change: {day30}

TECHNICAL INDICATORS:
- SMA(20): ${sma20:.2f}
- SMA(50): ${sma50:.2f}
- EMA(12): ${ema12:.2f}
- EMA(26): ${ema26:.2f}
- RSI(14): {rsi:.2f}
- MACD: {macd:.2f}
- MACD Signal: {signal:.2f}
- MACD Histogram: {histogram:.2f}

VOLUME:
- Current: {volume:.0f}
- 20-day Average: {volume_avg:.0f}
- Current vs Avg: {volume_change}

Provide JSON response:
{{
  "prediction": <tomorrow's predicted price as number>,
  "confidence": <0-1 as number>,
  "sentiment": <"bullish"/"bearish"/"neutral">,
  "technicalAnalysis": "<2-3 sentence analysis of indicators>",
  "sentimentScore": <-1 to 1 as number, based on overall market sentiment>,
  "recommendation": "<buy/hold/sell with brief reasoning>",
  "keySignals": ["<signal1>", "<signal2>", "<signal3>"]
}}"""


def _pct(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.2f}%"


def build_analysis_prompt(
    ticker: str,
    current_price: float,
    indicators: IndicatorBundle,
    momentum: MomentumSummary,
) -> str:
    return _ANALYSIS_PROMPT.format(
        ticker=ticker,
        price=current_price,
        day1=_pct(momentum.day1_pct),
        day7=_pct(momentum.day7_pct),
        day30=_pct(momentum.day30_pct),
        sma20=indicators.sma20,
        sma50=indicators.sma50,
        ema12=indicators.ema12,
        ema26=indicators.ema26,
        rsi=indicators.rsi14,
        macd=indicators.macd.line,
        signal=indicators.macd.signal,
        histogram=indicators.macd.histogram,
        volume=momentum.volume_current,
        volume_avg=momentum.volume_average20,
        volume_change=_pct(momentum.volume_change_pct),
    )
