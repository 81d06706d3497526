"""Console dashboard — a single page over the console routes."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

dashboard_router = APIRouter()

DASHBOARD_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Cognitive Persuasion Engine</title>
    <style>
        :root {
            --color-bg: #f5f6fb;
            --color-card: #ffffff;
            --color-border: #e3e5ef;
            --color-text: #1d1f2c;
            --color-muted: #6b6f85;
            --color-primary: #4f46e5;
            --color-danger: #dc2626;
            --agent-logic: #2563eb;
            --agent-emotion: #db2777;
            --agent-creative: #9333ea;
            --agent-authority: #d97706;
            --agent-social: #059669;
        }
        * { box-sizing: border-box; }
        body { margin: 0; font-family: system-ui, sans-serif; background: var(--color-bg); color: var(--color-text); }
        header { display: flex; justify-content: space-between; align-items: center;
                 padding: 14px 24px; background: var(--color-card); border-bottom: 1px solid var(--color-border); }
        header h1 { font-size: 18px; margin: 0; }
        .badge { border: 1px solid var(--color-border); border-radius: 999px; padding: 3px 10px; font-size: 12px; margin-left: 8px; }
        main { display: grid; grid-template-columns: 340px 1fr; gap: 20px; padding: 20px 24px; }
        .card { background: var(--color-card); border: 1px solid var(--color-border); border-radius: 10px; padding: 16px; margin-bottom: 16px; }
        .card h2 { font-size: 15px; margin: 0 0 12px; }
        label { display: block; font-size: 12px; color: var(--color-muted); margin: 8px 0 4px; }
        select, textarea, input { width: 100%; padding: 8px; border: 1px solid var(--color-border); border-radius: 6px; font: inherit; }
        button { background: var(--color-primary); color: #fff; border: 0; border-radius: 6px; padding: 8px 14px; cursor: pointer; margin-top: 10px; }
        button.secondary { background: transparent; color: var(--color-primary); border: 1px solid var(--color-primary); }
        .error { color: var(--color-danger); font-size: 13px; min-height: 18px; }
        .msg { border-left: 3px solid var(--color-border); padding: 8px 12px; margin: 8px 0; background: #fafbff; border-radius: 4px; }
        .msg.system { border-color: var(--color-primary); font-weight: 600; }
        .msg.error { border-color: var(--color-danger); }
        .msg .meta { font-size: 11px; color: var(--color-muted); margin-bottom: 4px; display: flex; justify-content: space-between; }
        .msg.logic { border-color: var(--agent-logic); }
        .msg.emotion { border-color: var(--agent-emotion); }
        .msg.creative { border-color: var(--agent-creative); }
        .msg.authority { border-color: var(--agent-authority); }
        .msg.social { border-color: var(--agent-social); }
        .typing { font-size: 12px; color: var(--color-muted); font-style: italic; }
        .stats { display: flex; gap: 16px; font-size: 13px; color: var(--color-muted); }
        .packages { display: grid; grid-template-columns: repeat(2, 1fr); gap: 8px; }
        .package { border: 1px solid var(--color-border); border-radius: 8px; padding: 10px; font-size: 13px; }
    </style>
</head>
<body>
<header>
    <h1>Cognitive Persuasion Engine</h1>
    <div>
        <span class="badge" id="creditBadge">$0.00 Credits</span>
        <span class="badge" id="sessionBadge">Session: browser</span>
    </div>
</header>
<main>
    <section>
        <div class="card">
            <h2>New Session</h2>
            <label for="business">Business</label>
            <select id="business"></select>
            <label for="audience">Target audience</label>
            <select id="audience"></select>
            <label for="objective">Mission objective</label>
            <textarea id="objective" rows="3" placeholder="e.g. Convince homeowners to book a roof inspection"></textarea>
            <button onclick="App.startLive()">Start live session</button>
            <button class="secondary" onclick="App.stopLive()">Stop</button>
            <div class="error" id="liveError"></div>
        </div>
        <div class="card">
            <h2>Credits</h2>
            <div class="packages" id="packages"></div>
            <div class="error" id="creditError"></div>
        </div>
    </section>
    <section>
        <div class="card">
            <h2>Live Session</h2>
            <div class="stats" id="liveStats"></div>
            <div id="messages"></div>
            <div class="typing" id="typing"></div>
        </div>
    </section>
</main>
<script>
const App = {
    state: { live: null, agents: {} },
    timer: null,

    // ── Data Fetching ──────────────────────────────────

    async api(url, opts) {
        try {
            const r = await fetch(url, opts);
            const body = await r.json();
            if (!r.ok) return { error: body.detail || 'Request failed' };
            return body;
        } catch { return { error: 'Request failed' }; }
    },

    post(url, data) {
        return this.api(url, {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: data ? JSON.stringify(data) : undefined,
        });
    },

    async init() {
        const [header, businesses, audiences] = await Promise.all([
            this.api('/header'), this.api('/businesses'), this.api('/audiences'),
        ]);
        if (!header.error) {
            document.getElementById('creditBadge').textContent = header.credits_display;
            if (header.session_badge) {
                document.getElementById('sessionBadge').textContent = 'Session: ' + header.session_badge;
            }
        }
        this.fillSelect('business', businesses.items || [], 'business_type_id');
        this.fillSelect('audience', audiences.items || [], 'audience_id');
        this.loadCredits();
    },

    fillSelect(id, items, key) {
        const el = document.getElementById(id);
        el.innerHTML = items.map(i => `<option value="${i[key]}">${this.escape(i.name)}</option>`).join('');
    },

    escape(text) {
        const div = document.createElement('div');
        div.textContent = text || '';
        return div.innerHTML;
    },

    // ── Live session ───────────────────────────────────

    async startLive() {
        const payload = {
            business_type_id: document.getElementById('business').value,
            audience_id: document.getElementById('audience').value,
            mission_objective: document.getElementById('objective').value,
        };
        const live = await this.post('/live/start', payload);
        document.getElementById('liveError').textContent = live.error || '';
        if (live.error) return;
        this.render(live);
        clearInterval(this.timer);
        this.timer = setInterval(() => this.poll(), 1000);
    },

    async stopLive() {
        const live = await this.post('/live/stop');
        clearInterval(this.timer);
        if (!live.error) this.render(live);
    },

    async poll() {
        const live = await this.api('/live');
        if (live.error) return;
        this.render(live);
        if (live.state !== 'running') clearInterval(this.timer);
    },

    async regenerate(agent) {
        await this.post('/live/regenerate/' + agent);
        this.poll();
    },

    render(live) {
        const agents = live.agents || {};
        document.getElementById('messages').innerHTML = live.messages.map(m => {
            const agent = agents[m.agent_type];
            const who = agent ? `${agent.name} · ${agent.provider}` : m.type;
            const action = agent ? `<a href="#" onclick="App.regenerate('${m.agent_type}'); return false;">regenerate</a>` : '';
            const time = new Date(m.timestamp).toLocaleTimeString();
            return `<div class="msg ${m.type} ${m.agent_type || ''}">
                <div class="meta"><span>${this.escape(who)} · ${time}</span>${action}</div>
                ${this.escape(m.content)}
            </div>`;
        }).join('');
        document.getElementById('typing').textContent = live.typing.length
            ? live.typing.map(a => (agents[a] || {}).name || a).join(', ') + ' is typing...'
            : '';
        const s = live.stats;
        document.getElementById('liveStats').innerHTML =
            `<span>Credits used: ${s.credits_used}</span><span>Messages: ${s.messages_count}</span><span>Duration: ${s.duration_display}</span>`;
    },

    // ── Credits ────────────────────────────────────────

    async loadCredits() {
        const credits = await this.api('/credits');
        document.getElementById('creditError').textContent = credits.error || '';
        if (credits.error) return;
        document.getElementById('packages').innerHTML = credits.packages.map(p => `
            <div class="package">
                <strong>${this.escape(p.name)}</strong> ${p.badge ? `<span class="badge">${p.badge}</span>` : ''}
                <div>${p.credits} credits · $${p.price.toFixed(2)}</div>
                <div>$${p.price_per_credit.toFixed(2)} per credit</div>
                <button onclick="App.purchase('${p.id}')">Buy</button>
            </div>`).join('');
    },

    async purchase(packageId) {
        const result = await this.post('/credits/purchase', { package_id: packageId });
        document.getElementById('creditError').textContent = result.error || '';
        if (!result.error) {
            document.getElementById('creditBadge').textContent = result.balance_display;
            this.loadCredits();
        }
    },
};

document.addEventListener('DOMContentLoaded', () => App.init());
</script>
</body>
</html>
"""


@dashboard_router.get("/", response_class=HTMLResponse)
async def dashboard():
    return DASHBOARD_HTML
