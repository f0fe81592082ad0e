"""Dashboard HTML with inline CSS and vanilla JS."""


def get_dashboard_html(refresh_interval: float = 2.0) -> str:
    return _TEMPLATE.replace("__REFRESH_MS__", str(int(refresh_interval * 1000)))


_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Agent Teams</title>
<style>
  :root {
    --bg: #0d1117; --surface: #161b22; --border: #30363d;
    --text: #e6edf3; --text-muted: #8b949e; --text-dim: #6e7681;
    --active: #3fb950; --recent: #d29922; --stale: #6e7681; --accent: #58a6ff;
  }
  * { margin: 0; padding: 0; box-sizing: border-box; }
  body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Helvetica, Arial, sans-serif;
         background: var(--bg); color: var(--text); line-height: 1.5; }
  .container { max-width: 1080px; margin: 0 auto; padding: 24px 16px; }
  header { display: flex; justify-content: space-between; align-items: center;
           padding-bottom: 16px; border-bottom: 1px solid var(--border); margin-bottom: 24px; }
  header h1 { font-size: 20px; font-weight: 600; }
  #live { font-size: 12px; color: var(--text-dim); }
  #live.on { color: var(--active); }
  .grid { display: grid; grid-template-columns: 320px 1fr; gap: 20px; }
  .team-card { background: var(--surface); border: 1px solid var(--border); border-radius: 8px;
               padding: 12px 16px; margin-bottom: 8px; cursor: pointer; }
  .team-card.selected { border-color: var(--accent); }
  .team-name { font-weight: 600; font-size: 14px; }
  .team-meta { font-size: 12px; color: var(--text-muted); }
  .badge { display: inline-block; padding: 1px 8px; border-radius: 10px; font-size: 11px;
           font-weight: 600; text-transform: uppercase; }
  .badge.active { color: var(--active); } .badge.recent { color: var(--recent); }
  .badge.stale { color: var(--stale); }
  .panel { background: var(--surface); border: 1px solid var(--border); border-radius: 8px;
           padding: 16px; margin-bottom: 16px; }
  .panel h2 { font-size: 15px; margin-bottom: 8px; }
  .row { font-size: 13px; padding: 4px 0; border-bottom: 1px solid var(--border); }
  .row:last-child { border-bottom: none; }
  .muted { color: var(--text-muted); }
  .empty { text-align: center; padding: 48px; color: var(--text-muted); }
</style>
</head>
<body>
<div class="container">
  <header>
    <h1>Agent Teams</h1>
    <span id="live">offline</span>
  </header>
  <div class="grid">
    <div id="teams"><div class="empty">Loading...</div></div>
    <div id="detail"><div class="empty">Select a team</div></div>
  </div>
</div>

<script>
const REFRESH_MS = __REFRESH_MS__;
let currentTeam = null;
let overview = {};

async function fetchJSON(path) {
  const res = await fetch(path);
  if (!res.ok) return null;
  return res.json();
}

async function loadTeams() {
  const [teams, ov] = await Promise.all([fetchJSON('/api/teams'), fetchJSON('/api/overview')]);
  overview = {};
  for (const o of ov || []) overview[o.name] = o;
  const el = document.getElementById('teams');
  if (!teams || teams.length === 0) {
    el.innerHTML = '<div class="empty">No teams found</div>';
    return;
  }
  el.innerHTML = teams.map(t => {
    const o = overview[t.name] || {};
    const sel = t.name === currentTeam ? ' selected' : '';
    return `<div class="team-card${sel}" data-name="${esc(t.name)}">
      <div class="team-name">${esc(t.name)} <span class="badge ${t.status}">${t.status}</span></div>
      <div class="team-meta">${t.memberCount} members &middot; ${o.taskCount || 0} tasks
        &middot; ${o.unreadMessages || 0} unread &middot; ${t.ageHours}h ago</div>
    </div>`;
  }).join('');
  el.querySelectorAll('.team-card').forEach(card =>
    card.addEventListener('click', () => selectTeam(card.dataset.name)));
}

async function loadDetail(name) {
  const [cfg, tasks, inboxes] = await Promise.all([
    fetchJSON(`/api/teams/${encodeURIComponent(name)}`),
    fetchJSON(`/api/tasks/${encodeURIComponent(name)}`),
    fetchJSON(`/api/teams/${encodeURIComponent(name)}/inboxes`),
  ]);
  const el = document.getElementById('detail');
  let html = `<div class="panel"><h2>${esc(name)}</h2>
    <div class="muted">${esc(cfg ? cfg.description : '')}</div></div>`;

  html += '<div class="panel"><h2>Tasks</h2>';
  html += (tasks || []).map(t =>
    `<div class="row">#${esc(String(t.id))} <b>${esc(t.subject || t.title || '')}</b>
      <span class="muted">${esc(t.status || '')}</span></div>`).join('') || '<div class="muted">No tasks</div>';
  html += '</div>';

  html += '<div class="panel"><h2>Inboxes</h2>';
  html += Object.entries(inboxes || {}).map(([agent, msgs]) => {
    const unread = msgs.filter(m => !m.read).length;
    return `<div class="row">${esc(agent)} <span class="muted">${msgs.length} messages, ${unread} unread</span></div>`;
  }).join('') || '<div class="muted">No inboxes</div>';
  html += '</div>';
  el.innerHTML = html;
}

function selectTeam(name) {
  currentTeam = name;
  refresh();
}

function refresh() {
  loadTeams();
  if (currentTeam) loadDetail(currentTeam);
}

function esc(s) {
  if (!s) return '';
  const d = document.createElement('div');
  d.textContent = s;
  return d.innerHTML.replace(/"/g, '&quot;').replace(/'/g, '&#39;');
}

function connect() {
  const live = document.getElementById('live');
  const proto = location.protocol === 'https:' ? 'wss:' : 'ws:';
  const ws = new WebSocket(`${proto}//${location.host}/ws`);
  ws.onopen = () => { live.textContent = 'live'; live.className = 'on'; };
  ws.onmessage = (msg) => {
    const data = JSON.parse(msg.data);
    if (data.type === 'file_changed') refresh();
  };
  ws.onclose = () => {
    live.textContent = 'offline'; live.className = '';
    setTimeout(connect, REFRESH_MS);
  };
}

refresh();
connect();
setInterval(() => { if (document.getElementById('live').className !== 'on') refresh(); }, REFRESH_MS);
</script>
</body>
</html>"""
